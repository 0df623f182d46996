"""Per-stage prompt construction."""

from config.defaults import DEFAULTS
from core.state import STAGE_TAGS


def stage_context(stage, results):
    """Finished content of earlier stages, given read-only to this stage."""
    if stage == "styling":
        return results.get("markup", "")
    if stage == "behavior":
        return f"{results.get('markup', '')}\n\n{results.get('styling', '')}"
    return ""


def build_stage_messages(stage, history, context="", prior_code="", sentinel=None):
    """Return provider messages for one stage.

    The stage instruction is appended to the trailing user turn, or sent as a
    new user turn when the history ends with an assistant turn. History
    turns are copied, never mutated.
    """
    sentinel = sentinel or DEFAULTS["sentinel"]
    label = DEFAULTS["stage_labels"][stage]
    tag = STAGE_TAGS[stage]

    instruction = f"Generate the {label} code for this UI."
    parts = [instruction]

    if prior_code:
        parts.append(
            f"Here is the existing {label} code:\n```{tag}\n{prior_code}\n```\n\n"
            f"If this code is sufficient and requires no changes for the new request, "
            f"output EXACTLY this in a code block: ```{sentinel}```. "
            f"Otherwise output the full new code."
        )

    if context:
        parts.append(f"Here is the code generated so far:\n{context}")

    suffix = "\n\n".join(parts)
    messages = [turn.to_message() for turn in history]

    if messages and messages[-1]["role"] == "user":
        messages[-1]["content"] += "\n\n" + suffix
    else:
        messages.append({"role": "user", "content": suffix})
    return messages
