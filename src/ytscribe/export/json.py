from __future__ import annotations

import json
from typing import Any

from ytscribe.storage.models import VideoRecord, record_to_dict
from ytscribe.video_id import extract_video_id


def build_payload(record: VideoRecord) -> dict[str, Any]:
    payload = record_to_dict(record)
    payload["video_id"] = extract_video_id(record.url)
    payload["summary"] = record.summary
    return payload


def dumps_payload(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)
