"""
HTML rendering for the card and board views.

Rendering is a pure function of its inputs. Templates are autoescaped, so
card titles can never inject markup.
"""
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from jinja2 import Environment, PackageLoader, select_autoescape
from markupsafe import Markup

from ..schema import Card, Column

env = Environment(
    loader=PackageLoader("kanban", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_card(
    card_id: str,
    title: str,
    column: Column,
    editing: bool = False,
    draft: str = "",
    dragging: bool = False,
) -> Markup:
    return Markup(env.get_template("card.html").render(
        card_id=card_id,
        title=title,
        column=column,
        editing=editing,
        draft=draft,
        dragging=dragging,
    ))


def group_by_column(cards: Iterable[Card]) -> Dict[Column, List[Card]]:
    """Partition cards by column, keeping list order within each column."""
    grouped: Dict[Column, List[Card]] = {col: [] for col in Column.ordered()}
    for card in cards:
        grouped[card.column].append(card)
    return grouped


def render_board(
    columns: Sequence[Tuple[Column, List[Markup]]] = (),
    loading: bool = False,
    error: Optional[str] = None,
    adding: Optional[Column] = None,
    new_title: str = "",
    drag_over: Optional[Column] = None,
) -> Markup:
    """Render the board from already-rendered card fragments per column."""
    return Markup(env.get_template("board.html").render(
        columns=columns,
        loading=loading,
        error=error,
        adding=adding,
        new_title=new_title,
        drag_over=drag_over,
    ))


def render_board_for(cards: Iterable[Card], error: Optional[str] = None) -> Markup:
    """Render a fresh board (every card in normal mode, add forms hidden)."""
    grouped = group_by_column(cards)
    columns = [
        (col, [render_card(c.card_id, c.title, c.column) for c in grouped[col]])
        for col in Column.ordered()
    ]
    return render_board(columns, error=error)


def render_page(board_html: Markup, script_url: str, stylesheet_url: str) -> str:
    return env.get_template("page.html").render(
        board=board_html,
        script_url=script_url,
        stylesheet_url=stylesheet_url,
    )
