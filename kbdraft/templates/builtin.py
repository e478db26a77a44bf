from __future__ import annotations

from typing import List

from ..models.template import Template

TROUBLESHOOTING = """\
# [Short description of the issue]

## Problem
[What the user sees: error messages, affected systems, when it started]

## Prerequisites
[Access, tools or permissions needed before starting]

## Solution
1. [First step]
2. [Second step]
3. [Verify the fix]

## Expected Result
[What the user should see once the issue is resolved]

## Additional Notes
[Workarounds, related issues, how to prevent a recurrence]"""

HOW_TO = """\
# How to [accomplish the task]

## Problem
[What the reader wants to get done and why]

## Prerequisites
[Accounts, roles or software required]

## Solution
1. [First step]
2. [Second step]

## Expected Result
[How the reader knows the task is complete]"""

KNOWN_ISSUE = """\
# Known issue: [summary]

## Problem
[Symptoms and affected versions]

## Solution
[Current workaround until a permanent fix ships]

## Additional Notes
[Tracking ticket and expected fix date]"""

BUILTIN_TEMPLATES: List[Template] = [
    Template(
        id="builtin-troubleshooting",
        name="Troubleshooting Guide",
        slug="troubleshooting",
        description="Problem, steps to resolve, and how to confirm the fix",
        output_structure=TROUBLESHOOTING,
    ),
    Template(
        id="builtin-how-to",
        name="How-To",
        slug="how-to",
        description="Step-by-step instructions for a routine task",
        output_structure=HOW_TO,
    ),
    Template(
        id="builtin-known-issue",
        name="Known Issue",
        slug="known-issue",
        description="A documented defect with its workaround",
        output_structure=KNOWN_ISSUE,
    ),
]


def list_templates() -> List[Template]:
    return list(BUILTIN_TEMPLATES)


def get_template(key: str) -> Template:
    """Look a template up by id or slug."""
    for template in BUILTIN_TEMPLATES:
        if key in (template.id, template.slug):
            return template
    raise KeyError(f"Unknown template: {key}")
