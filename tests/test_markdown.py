import pytest

from kbdraft.codec.grammar import canonical_section
from kbdraft.codec.markdown import parse, serialize
from kbdraft.models.article import Article


def full_article(**overrides):
    data = dict(
        title="Fix Login Issue",
        problem="Users cannot log in due to a timeout error.",
        solution="1. Clear browser cache\n2. Restart the application\n\nThen try again.",
        expected_result="User can log in successfully",
        prerequisites="Admin access required",
        additional_notes="This is a known issue",
    )
    data.update(overrides)
    return Article(**data)


# ---------------- grammar ----------------

@pytest.mark.parametrize("header,expected", [
    ("Problem", "problem"),
    ("SOLUTION", "solution"),
    ("Resolution", "solution"),
    ("expected outcome", "expected_result"),
    ("Expected Result", "expected_result"),
    ("Requirements", "prerequisites"),
    ("Notes", "additional_notes"),
    ("Additional Notes", "additional_notes"),
    ("Labels", "tags"),
    ("  Tags  ", "tags"),
    ("Random", None),
    ("Solutions", None),
])
def test_canonical_section(header, expected):
    assert canonical_section(header) == expected


# ---------------- serialize ----------------

def test_serialize_full_article():
    md = serialize(full_article())
    assert md == (
        "# Fix Login Issue\n\n"
        "## Problem\nUsers cannot log in due to a timeout error.\n\n"
        "## Solution\n1. Clear browser cache\n2. Restart the application\n\nThen try again.\n\n"
        "## Expected Result\nUser can log in successfully\n\n"
        "## Prerequisites\nAdmin access required\n\n"
        "## Additional Notes\nThis is a known issue"
    )


def test_serialize_omits_empty_optional_sections():
    md = serialize(full_article(expected_result="", prerequisites=None, additional_notes=""))
    assert "## Expected Result" not in md
    assert "## Prerequisites" not in md
    assert "## Additional Notes" not in md
    assert md.endswith("Then try again.")


def test_serialize_never_writes_tags():
    md = serialize(full_article(tags=["login", "timeout"]))
    assert "## Tags" not in md
    assert "login" not in md


def test_serialize_empty_article_is_total():
    md = serialize(Article())
    assert md.startswith("#")
    assert "## Problem" in md and "## Solution" in md
    assert md == md.strip()


# ---------------- parse ----------------

def test_parse_recovers_serialized_fields():
    article = full_article()
    parsed = parse(serialize(article))
    assert parsed.title == article.title
    assert parsed.problem == article.problem
    assert parsed.solution == article.solution
    assert parsed.expected_result == article.expected_result
    assert parsed.prerequisites == article.prerequisites
    assert parsed.additional_notes == article.additional_notes
    assert parsed.tags == []


def test_alias_equivalence():
    assert parse("## Solution\nX").solution == parse("## Resolution\nX").solution == "X"


def test_duplicate_section_merge():
    assert parse("## Problem\nA\n## Problem\nB").problem == "A\n\nB"


def test_alias_after_canonical_appends_in_order():
    md = "## Resolution\nfirst\n\n## Notes\nn1\n## Solution\nsecond\n## Additional Notes\nn2"
    parsed = parse(md)
    assert parsed.solution == "first\n\nsecond"
    assert parsed.additional_notes == "n1\n\nn2"


def test_missing_title_defaults():
    assert parse("## Problem\nX").title == "Untitled Article"


def test_first_h1_wins_and_later_h1_stays_in_section():
    parsed = parse("# First\n## Problem\nA\n# Second\nB")
    assert parsed.title == "First"
    assert parsed.problem == "A\n# Second\nB"


def test_title_markers_trimmed():
    assert parse("#    Spaced title   \n").title == "Spaced title"


def test_h3_is_section_content():
    parsed = parse("## Solution\n### Step one\ndo it")
    assert parsed.solution == "### Step one\ndo it"


def test_unrecognized_section_dropped_silently():
    warnings = []
    parsed = parse("## Random\nstuff\n## Problem\nX", on_warning=warnings.append)
    assert parsed.problem == "X"
    for value in (parsed.title, parsed.problem, parsed.solution, parsed.expected_result,
                  parsed.prerequisites, parsed.additional_notes):
        assert "stuff" not in value
    assert "stuff" not in parsed.tags
    assert warnings == []


def test_content_before_first_section_is_ignored():
    parsed = parse("# T\nintro paragraph\n## Problem\nX")
    assert parsed.problem == "X"
    assert "intro" not in parsed.problem


def test_multi_paragraph_content_preserved():
    parsed = parse("## Solution\n\n\nStep 1\n\n\nStep 2\n\n")
    assert parsed.solution == "Step 1\n\n\nStep 2"


def test_case_insensitive_headers():
    assert parse("## EXPECTED OUTCOME\nok").expected_result == "ok"


def test_tags_concatenated_without_dedup():
    assert parse("## Tags\na, b\n## Labels\nb, c").tags == ["a", "b", "b", "c"]


def test_tags_empty_entries_dropped():
    assert parse("## Tags\n , a,,  b , ").tags == ["a", "b"]


def test_duplicate_section_reports_warning_but_keeps_going():
    warnings = []
    parsed = parse("## Solution\nA\n## Resolution\nB\n## Tags\nx\n## Labels\ny",
                   on_warning=warnings.append)
    assert parsed.solution == "A\n\nB"
    assert parsed.tags == ["x", "y"]
    assert len(warnings) == 2
    assert '"Resolution"' in warnings[0]


def test_empty_section_does_not_count():
    warnings = []
    parsed = parse("## Problem\n\n## Problem\nreal", on_warning=warnings.append)
    assert parsed.problem == "real"
    assert warnings == []


def test_crlf_input():
    parsed = parse("# Title\r\n## Problem\r\nline one\r\nline two\r\n")
    assert parsed.title == "Title"
    assert parsed.problem == "line one\nline two"


@pytest.mark.parametrize("text", ["", "\n\n", "##", "#", "## \n", "random text", "#NoSpace\n##NoSpace"])
def test_parse_is_total(text):
    parsed = parse(text)
    assert parsed.title == "Untitled Article"
    assert parsed.problem == ""
    assert parsed.tags == []


# ---------------- serialize/parse asymmetry ----------------

def test_serialize_of_parse_is_not_identity():
    md = "# T\n\n## Resolution\nfix it\n\n## Random\nstuff\n\n## Tags\na, b"
    again = serialize(parse(md))
    assert again != md
    assert "## Solution\nfix it" in again
    assert "Resolution" not in again
    assert "stuff" not in again
    assert "## Tags" not in again


def test_parse_of_serialize_is_stable_after_one_pass():
    md = "# T\n\n\n## Problem\n  p  \n## Notes\nn"
    once = serialize(parse(md))
    assert serialize(parse(once)) == once


def test_parsed_article_to_article_recomputes_markdown():
    article = parse("# T\n## Problem\nP\n## Solution\nS\n## Tags\nx").to_article(ticket_key="SUP-1")
    assert article.ticket_key == "SUP-1"
    assert article.tags == ["x"]
    assert article.expected_result is None
    assert article.content_markdown == "# T\n\n## Problem\nP\n\n## Solution\nS"
