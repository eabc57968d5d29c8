"""
Gunicorn configuration for the Travelog API.

Run with:  gunicorn travelog.main:app -c gunicorn.conf.py

Env vars that override defaults:
  PORT     — TCP port to bind
  WORKERS  — number of worker processes (default: 2)
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# Badge dispatch runs inline with journal writes; keep enough workers
# that a slow evaluation does not stall other requests.
workers = int(os.environ.get("WORKERS", "2"))

worker_class = "uvicorn.workers.UvicornWorker"

keepalive = 5

# Retroactive evaluation replays every user's history in one request.
timeout = 300

# Application logs go through structlog; gunicorn keeps its own access log.
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

graceful_timeout = 30
