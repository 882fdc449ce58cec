"""Answer questions from search results with a chat model."""
from textwrap import dedent

from .llm import ChatClient
from .retrieval.forest import ResultForest, SubsetItem, SubsetPage
from .store import NoteStore

SYSTEM_PREAMBLE = dedent("""\
    You are a helpful question-answering system named QAS. Your goal is to answer a factual question based on the content of a large database of notes, along with your personal knowledge.

    We'll start by telling you the question you'll be answering, and feeding you a subset of notes that have been selected from the database based on their embedding distance from the question. Then we'll repeat the question, and ask for your response. Notes will be given to you in RoamResearch Markdown format. In RoamResearch Markdown format, references to individual blocks are enclosed in double parentheses, and references to page titles are enclosed in double square brackets.

    To help you answer questions, we've put a link to each page at the top of the page, and a link to each block at the end of each bullet point. Remember these IDs, as you'll be asked to cite them in your answer. Here's an example of the format you should expect:

    ```
    [[Page Title 1]]
    - This is text in a root-level bullet point.[¹](((BlockId1)))
    \t- This is text, referencing the [[Page Title 2]], in a child-level bullet point.[*](((BlockId2)))
    \t\t- This is [a link]([[Page Title 3]]) in a child-level bullet point.[²](((BlockId2)))
    [[Page Title 2]]
    - This is some more text in a root-level bullet point.[³](((BlockId3)))
    ```

    This is the question you'll be answering:
""")

NOTES_INTRO = "Here are some notes that might help you answer the question:"

QUESTION_REPEAT = "Here's the question again, for your reference:"

ANSWER_INSTRUCTIONS = dedent("""\
    Answer the question below in RoamResearch Markdown format:

    - To add a footnote referencing a BlockId: [¹](((BlockId)))
    - To link text to a BlockId: [some inline text](((BlockId)))
    - To link to a page by its title: [[Page Title]]
    - To link text to a page: [some inline text]([[Page Title]])

    Only make links to a [[Page Title]] or to a ((BlockId)). Do not link to anything else.

    Be concise in your answer.
""")


def format_result_page(store: NoteStore, page: SubsetPage) -> str:
    """Render a page's pruned outline with each item's full contents."""
    lines = [f"[[{page.title}]]"]

    stack: list[tuple[SubsetItem, int]] = [(child, 0) for child in reversed(page.children)]
    while stack:
        subset_item, indent = stack.pop()
        item = store.get_item(subset_item.id)
        lines.append("\t" * indent + f"- {item.contents} [*]((({item.id})))")
        stack.extend((child, indent + 1) for child in reversed(subset_item.children))

    return "\n".join(lines)


def format_results(store: NoteStore, results: ResultForest) -> str:
    """Render every page of a result forest for the prompt, best page first."""
    pages = results.get_subset_page_list(store)
    return "\n".join(format_result_page(store, page) for page in pages)


def build_answer_messages(question: str, notes: str) -> list[dict[str, str]]:
    """Assemble the chat conversation asking the model to answer from the notes."""
    return [
        {"role": "system", "content": SYSTEM_PREAMBLE},
        {"role": "user", "content": question},
        {"role": "system", "content": NOTES_INTRO},
        {"role": "user", "content": notes},
        {"role": "system", "content": QUESTION_REPEAT},
        {"role": "user", "content": question},
        {"role": "system", "content": ANSWER_INSTRUCTIONS},
    ]


def generate_answer(
    store: NoteStore,
    chat_client: ChatClient,
    results: ResultForest,
    question: str,
) -> str:
    """Answer a question using the notes in a result forest."""
    notes = format_results(store, results)
    return chat_client.complete(build_answer_messages(question, notes))
