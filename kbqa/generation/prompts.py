"""
Prompt and answer templates.

Keeping templates in a separate module makes them easy to iterate on
without touching assembly logic.  Arabic is the primary response
language of the service.
"""

# ---------------------------------------------------------------------------
# Built-in answer formatting
# ---------------------------------------------------------------------------

NO_CONTEXT_RESPONSE = "لا توجد معلومات كافية في المصادر الحالية."

# One block per retained chunk, in rank order
ANSWER_BLOCK_TEMPLATE = "🔹 من ({source} - جزء {chunk_index}):\n{preview}\n"

ANSWER_BLOCK_SEPARATOR = "\n"

# ---------------------------------------------------------------------------
# External generation
# ---------------------------------------------------------------------------

SYSTEM_PROMPT = """\
You are a support assistant answering questions about the company's software \
from an internal knowledge base.

RULES:
- Answer ONLY from the numbered sources in the user message. Do NOT add outside facts.
- If the sources do not contain the answer, say so directly -- do not guess.
- Cite every claim with its source number, e.g. [2].
- Answer in Arabic unless the question is written in another language.
"""

USER_PROMPT = """\
QUESTION:
{question}
{context_block}
SOURCES:
{sources}
"""

CONTEXT_LINE_TEMPLATE = "{label}: {value}"

SOURCE_TEMPLATE = """\
[{index}] {source} | chunk {chunk_index} | score {score:.3f}
<<<
{text}
>>>"""
