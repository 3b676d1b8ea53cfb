"""
Relevance ranker for document-grounded replies.

Given a user query and the user's documents, `build_docs_context` selects at
most `MAX_DOCS` documents that mention the query's words and renders them as
titled blocks within a `CONTEXT_BUDGET` character budget. `compose_prompt`
appends that context to the user's text below a delimiter. Both are pure.
"""

import re
from typing import Iterable, Optional, Protocol

TOKEN_SPLIT = re.compile(r"[\s,.;:!?()\[\]{}\"“”'’]+")
MIN_TOKEN_LENGTH = 3
MAX_DOCS = 2
DOC_CHUNK = 1600
CONTEXT_BUDGET = 3500
TRUNCATION_MARK = "\n…"
CONTEXT_HEADER = "Reference documents of the user (use them when relevant):"


class DocLike(Protocol):
    title: str
    content: str


def tokenize(query: str) -> list[str]:
    """Lower-cased distinct query words of at least three characters, in order of appearance."""
    tokens = []
    for token in TOKEN_SPLIT.split(query.lower()):
        if len(token) >= MIN_TOKEN_LENGTH and token not in tokens:
            tokens.append(token)
    return tokens


def score_doc(tokens: Iterable[str], title: str, content: str) -> int:
    """Number of tokens occurring anywhere in ``title + "\\n" + content`` (case-insensitive)."""
    haystack = f"{title}\n{content}".lower()
    return sum(1 for token in tokens if token in haystack)


def render_block(title: str, content: str) -> str:
    chunk = content[:DOC_CHUNK] + TRUNCATION_MARK if len(content) > DOC_CHUNK else content
    return f"### {title}\n{chunk}\n\n"


def build_docs_context(query: str, docs: Iterable[DocLike]) -> Optional[str]:
    """
    Select and render the documents relevant to `query`.

    Parameters
    ----------
    query : str
        Free-text user message.
    docs : Iterable[DocLike]
        Candidate documents (anything with `title` and `content`).

    Returns
    -------
    str | None
        Up to two ``### title`` blocks, best match first, or None when the
        query is blank, there are no documents, or nothing matches.
    """
    docs = list(docs)
    if not query.strip() or not docs:
        return None
    tokens = tokenize(query)
    if not tokens:
        return None

    scored = [(score_doc(tokens, doc.title, doc.content), doc) for doc in docs]
    # sorted() is stable: equal scores keep input order
    ranked = sorted((pair for pair in scored if pair[0] > 0), key=lambda pair: pair[0], reverse=True)

    out = ""
    for _, doc in ranked[:MAX_DOCS]:
        block = render_block(doc.title, doc.content)
        if len(out + block) > CONTEXT_BUDGET:
            break
        out += block
    return out.strip() or None


def compose_prompt(user_text: str, context: Optional[str], header: str = CONTEXT_HEADER) -> str:
    """User text, followed by the context under a ``---`` delimiter when there is one."""
    if not context:
        return user_text
    return f"{user_text}\n\n---\n{header}\n{context}"
