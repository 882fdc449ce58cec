"""Render search results as a Roam outline.

Pages render as `[[Title]]` page references and items as `((id))` block
references, so the output pastes straight back into Roam:

    \t`0.100` **[[Alpha]]**
    \t\t- ((A))
    \t\t\t- `0.100` ((B))
"""
from ..retrieval.forest import SubsetItem, SubsetPage


def format_distance(distance: float) -> str:
    """Distance as an inline code span with three decimals."""
    return f"`{distance:.3f}`"


def format_item_line(item: SubsetItem, indent: int) -> str:
    """One bullet line for an item."""
    reference = f"(({item.id}))"
    if item.distance is not None:
        reference = f"{format_distance(item.distance)} {reference}"
    return "\t" * indent + "- " + reference


def page_to_roam_text(page: SubsetPage, indent: int = 0) -> str:
    """Render a page and its pruned outline, one line per node."""
    lines = ["\t" * indent + f"{format_distance(page.min_distance)} **[[{page.title}]]**"]

    stack: list[tuple[SubsetItem, int]] = [(child, indent + 1) for child in reversed(page.children)]
    while stack:
        item, depth = stack.pop()
        lines.append(format_item_line(item, depth))
        stack.extend((child, depth + 1) for child in reversed(item.children))

    return "\n".join(lines)


def format_search_results(query: str, pages: list[SubsetPage], indent: int = 1) -> str:
    """Render a full search result: the query, then each page, best first."""
    blocks = [f"Query: `{query}`"]
    blocks.extend(page_to_roam_text(page, indent) for page in pages)
    return "\n".join(blocks) + "\n"
