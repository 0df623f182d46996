"""Server-sent event records for the generation stream."""

import json

DONE_EVENT = "event: done\ndata: [DONE]\n\n"


def format_event(payload):
    """One JSON object per blank-line-delimited `data:` record."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def parse_events(body):
    """Parse a complete stream back into payload dicts. Stops at the done event."""
    events = []
    for record in body.split("\n\n"):
        lines = record.strip().splitlines()
        data = [line[len("data: "):] for line in lines if line.startswith("data: ")]
        if not data:
            continue
        if data[0] == "[DONE]":
            break
        events.append(json.loads(data[0]))
    return events
