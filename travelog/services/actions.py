"""
Action kinds that can trigger a badge dispatch.

Payload keys per action (all optional unless noted):
  memory_created   type, tags (list[str]), location_name, entry_id
  journey_created  journey_id, title, destination
  journey_updated  journey_id (required by `completion` criteria)
  dream_created    dream_id, title, dream_type
  photo_uploaded   entry_id, file_count
  video_uploaded   entry_id, file_count
"""
import enum


class ActionKind(str, enum.Enum):
    memory_created = "memory_created"
    journey_created = "journey_created"
    journey_updated = "journey_updated"
    dream_created = "dream_created"
    photo_uploaded = "photo_uploaded"
    video_uploaded = "video_uploaded"
