"""Default pipeline settings."""

DEFAULTS = {
    "max_tokens": 4096,
    "sentinel": "[NO CHANGE]",
    "reasoning_open_tag": "<think>",
    "reasoning_close_tag": "</think>",
    "stage_labels": {"markup": "HTML", "styling": "CSS", "behavior": "JS"},
    "system_prompts": {
        "markup": (
            "You are a front-end developer. Respond with a single ```html code block "
            "containing only the body markup for the requested UI. No <style> or "
            "<script> tags, no commentary outside the code block."
        ),
        "styling": (
            "You are a front-end developer. Respond with a single ```css code block "
            "that styles the given markup. No commentary outside the code block."
        ),
        "behavior": (
            "You are a front-end developer. Respond with a single ```js code block "
            "with plain browser JavaScript for the given markup and styles. No "
            "commentary outside the code block."
        ),
    },
    "config_path": "config.json",
    "session_ttl": 3600,        # drop stored artifacts after 1 hour
    "max_sessions": 200,        # prevent unbounded memory growth
    "port": 3000,
    "log_level": "INFO",
}
