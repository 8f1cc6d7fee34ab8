"""
Rich panels for inspecting dossier records in a terminal.
"""
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..state.schema import Character, Comment, EffectiveAffiliation, TagItem
from ..systems import affiliations, fields, files
from ..systems.comments import visible_comments
from ..systems.reveal import RevealGate


STYLE_COLORS = {
    "NOTE": "white",
    "STAMP": "red",
    "WARNING": "yellow",
    "MEMO": "cyan",
}


def render_tag_library(groups: dict[str, list[TagItem]]) -> Panel:
    """Grouped tag suggestions, Universal first."""
    if not groups:
        return Panel(
            Text("No tags yet", style="dim"),
            title="[bold]TAG LIBRARY[/bold]",
            title_align="left",
            border_style="blue",
            padding=(0, 1),
        )

    table = Table.grid(padding=(0, 2))
    table.add_column(justify="left", width=20)
    table.add_column(justify="left")

    for label, items in groups.items():
        tags = ", ".join(format_tag(item) for item in items)
        table.add_row(f"[bold cyan]{escape(label)}[/bold cyan]", tags)

    return Panel(
        table,
        title="[bold]TAG LIBRARY[/bold]",
        title_align="left",
        border_style="blue",
        padding=(0, 1),
    )


def render_character_card(character: Character, gate: RevealGate) -> Panel:
    """
    View-mode card:
    - headline name (alias while the true name is blurred)
    - summary and bio lines
    - visible affiliations
    - newest comments
    """
    mode = gate.mode_for(character.id)

    if gate.is_name_obscured(character):
        alias = escape(fields.resolve(character, "alias", "alias", mode))
        headline = f"[bold]{alias}[/bold] [dim](name hidden)[/dim]"
    else:
        headline = f"[bold]{escape(fields.resolve(character, 'name', 'name', mode))}[/bold]"

    body = Table.grid(padding=(0, 2))
    body.add_column(justify="left", width=14, style="dim")
    body.add_column(justify="left")

    body.add_row("Summary", escape(fields.resolve(character, "summary", "summary", mode)) or "-")
    for key in ("age", "gender", "height", "weight", "level_or_exp"):
        value = fields.resolve(character, key, key, mode)
        if value:
            body.add_row(key.replace("_", " ").title(), escape(value))

    tags = affiliations.effective_list(character, mode)
    body.add_row("Affiliations", format_affiliations(tags) or "-")

    portrait = files.display_image_url(character, mode, gate.revealed_file_ids)
    if portrait:
        body.add_row("Portrait", escape(portrait))

    comments = visible_comments(character, mode)
    for comment in comments[:3]:
        body.add_row("Comment", format_comment(comment))

    title = "[bold red]SECRET[/bold red]" if mode.is_secret_revealed else "[bold]DOSSIER[/bold]"
    return Panel(
        body,
        title=f"{title} {headline}",
        title_align="left",
        border_style="red" if mode.is_secret_revealed else "blue",
        padding=(0, 1),
    )


# --- Helper Functions ---

def format_tag(item: TagItem) -> str:
    if item.rank:
        return f"{escape(item.name)} [dim]({escape(item.rank)})[/dim]"
    return escape(item.name)


def format_affiliations(entries: list[EffectiveAffiliation]) -> str:
    parts = []
    for entry in entries:
        label = escape(f"{entry.name} ({entry.rank})" if entry.rank else entry.name)
        if entry.is_strikethrough:
            label = f"[strike]{label}[/strike]"
        parts.append(label)
    return ", ".join(parts)


def format_comment(comment: Comment) -> str:
    color = STYLE_COLORS.get(comment.style_variant.value, "white")
    return f"[{color}]{escape(comment.user_name)}[/{color}]: {escape(comment.content)}"

