"""Directive shown to the language oracle."""

import json
from datetime import datetime, timezone
from typing import Optional, Sequence

from ..context.models import RequestContext
from ..identity.redaction import render_references
from ..timeutils import current_local_time, format_utc
from ..tools.base import ToolSpec

DIRECTIVE_TEMPLATE = """You are {assistant_name} - a scheduling assistant that interfaces via email.
Make sure your final answers are definitive, complete and well formatted.
You have access to the following tools, you can ONLY USE THE ONES DEFINED HERE:

{tool_catalog}

To use a tool, respond with exactly one JSON object and nothing else:
{{
  "tool": <name of the called tool>,
  "tool_input": <parameters for the tool matching the above JSON schema>
}}

Sometimes, tools return errors. In this case, try to handle the error intelligently or ask the user for more information.
Tools always take and return times in UTC, but times sent to users must be written in that user's own time zone.
In replies, summarize the necessary context and open the door to follow ups, for example "I have booked your chat with @username for 3:00 PM on Wednesday, December 20, 2023 EST. Please let me know if you need to reschedule."
If you can't find a referenced user, ask for their email or @username. Usernames require the @username format. Users don't know other users' ids.

The primary user's id is: {caller_id}
The primary user's username is: @{caller_username}
The current time in the primary user's timezone is: {current_time}
The current time in UTC is: {current_utc}
The primary user's time zone is: {time_zone}
{references_block}"""


def render_tool_catalog(specs: Sequence[ToolSpec]) -> str:
    """Names, descriptions and parameter schemas. Never bound credentials."""
    blocks = []
    for spec in specs:
        blocks.append(
            f"{spec.name}: {spec.description}\n"
            f"  parameters: {json.dumps(spec.parameters, sort_keys=True)}"
        )
    return "\n".join(blocks)


def build_directive(
    context: RequestContext,
    specs: Sequence[ToolSpec],
    assistant_name: str = "Cal.ai",
    now: Optional[datetime] = None,
) -> str:
    """
    Assemble the directive for one request.

    Args:
        context: Request context (caller and referenced people)
        specs: Tool catalog in registration order
        assistant_name: Name the assistant signs with
        now: Current instant (defaults to the real clock)

    Returns:
        Directive text
    """
    now = now or datetime.now(timezone.utc)
    caller = context.caller

    references_block = ""
    if context.references:
        references_block = (
            "\nThe email references the following @usernames and emails:\n"
            + render_references(context.references)
        )

    return DIRECTIVE_TEMPLATE.format(
        assistant_name=assistant_name,
        tool_catalog=render_tool_catalog(specs),
        caller_id=caller.id,
        caller_username=caller.username,
        current_time=current_local_time(caller.time_zone, now),
        current_utc=format_utc(now),
        time_zone=caller.time_zone,
        references_block=references_block,
    )
