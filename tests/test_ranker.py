from types import SimpleNamespace

from campus_portal.client.ranker import (
    CONTEXT_BUDGET,
    DOC_CHUNK,
    TRUNCATION_MARK,
    build_docs_context,
    compose_prompt,
    score_doc,
    tokenize,
)


def doc(title, content):
    return SimpleNamespace(title=title, content=content)


ADMISSION = doc("Admission Deadlines", "Apply before March 1. Submit transcript and passport copy.")


class TestTokenize:

    def test_drops_short_words_and_punctuation(self):
        assert tokenize("Is it OK? (yes), dorm!") == ["yes", "dorm"]

    def test_lowercases_and_deduplicates(self):
        assert tokenize("Admission admission ADMISSION rules") == ["admission", "rules"]

    def test_blank_query(self):
        assert tokenize("   ") == []


class TestScore:

    def test_counts_distinct_tokens_in_title_and_content(self):
        assert score_doc(["admission", "passport", "hostel"], ADMISSION.title, ADMISSION.content) == 2

    def test_substring_match_is_case_insensitive(self):
        assert score_doc(["transcript"], "", "TRANSCRIPTS are issued monthly") == 1


class TestBuildDocsContext:

    def test_relevant_document_is_included(self):
        context = build_docs_context("What documents are needed for admission?", [ADMISSION])
        assert context == "### Admission Deadlines\n" + ADMISSION.content

    def test_none_for_empty_query_or_no_docs(self):
        assert build_docs_context("", [ADMISSION]) is None
        assert build_docs_context("   ", [ADMISSION]) is None
        assert build_docs_context("admission", []) is None

    def test_none_when_only_short_tokens(self):
        assert build_docs_context("a b c", [ADMISSION]) is None

    def test_none_when_nothing_matches(self):
        assert build_docs_context("hostel laundry", [ADMISSION]) is None

    def test_at_most_two_documents_best_first(self):
        docs = [
            doc("One", "library"),
            doc("Two", "library hours exam"),
            doc("Three", "library hours"),
        ]
        context = build_docs_context("library hours exam", docs)
        assert context.startswith("### Two\n")
        assert "### Three\n" in context
        assert "### One" not in context

    def test_ties_keep_input_order(self):
        docs = [doc("First", "dormitory"), doc("Second", "dormitory"), doc("Third", "dormitory")]
        context = build_docs_context("dormitory", docs)
        assert context.index("### First") < context.index("### Second")
        assert "### Third" not in context

    def test_long_content_is_truncated(self):
        long_doc = doc("Rules", "rules " + "x" * 3000)
        context = build_docs_context("rules", [long_doc])
        body = context.split("\n", 1)[1]
        assert body == long_doc.content[:DOC_CHUNK] + TRUNCATION_MARK

    def test_budget_stops_before_overflowing_block(self):
        first = doc("A" * 2000, "scholarship")
        second = doc("B" * 2000, "scholarship")
        context = build_docs_context("scholarship", [first, second])
        assert len(context) <= CONTEXT_BUDGET
        assert "B" * 10 not in context

    def test_budget_overflow_on_first_block_gives_none(self):
        huge = doc("T" * (CONTEXT_BUDGET + 10), "grant")
        assert build_docs_context("grant", [huge]) is None


class TestComposePrompt:

    def test_without_context_returns_text(self):
        assert compose_prompt("Hello", None) == "Hello"
        assert compose_prompt("Hello", "") == "Hello"

    def test_appends_context_below_delimiter(self):
        assert compose_prompt("Hi", "### A\nB", header="Docs:") == "Hi\n\n---\nDocs:\n### A\nB"
