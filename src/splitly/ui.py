"""Interactive UI components for picking friends."""

import logging
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from .models import Friend

logger = logging.getLogger(__name__)


def fuzzy_match(query: str, text: str) -> bool:
    """
    Fuzzy match: all characters in query must appear in order in text.

    Example:
        query="av" matches "ava"
        query="ln" matches "leon"
    """
    query_idx = 0
    for char in text:
        if query_idx < len(query) and char == query[query_idx]:
            query_idx += 1
    return query_idx == len(query)


class FriendCompleter(Completer):
    """Fuzzy search completer for friend names."""

    def __init__(self, friends: list[Friend]):
        """Initialize the completer with known friends."""
        self.friends = friends

    def get_completions(self, document: Document, complete_event: Any):
        """Get fuzzy-matched completions."""
        query = document.text.lower()

        for friend in self.friends:
            if not query or fuzzy_match(query, friend.name.lower()):
                yield Completion(
                    text=friend.name,
                    start_position=-len(document.text),
                    display=friend.name,
                )


def select_friend_interactive(
    friends: list[Friend], balances: dict[str, str] | None = None
) -> str | None:
    """
    Interactive friend selection with fuzzy search.

    Args:
        friends: Known friends
        balances: Optional balance description per friend ID, shown as a hint

    Returns:
        Selected friend ID, or None to cancel
    """
    if not friends:
        print("\n⚠️  No friends yet. Add an expense to create your first friend.")
        return None

    print("\n👥 Friends:")
    for friend in friends:
        hint = f" ({balances[friend.id]})" if balances and friend.id in balances else ""
        print(f"  • {friend.name}{hint}")
    print("\n   Type to search, press Enter to confirm, Ctrl+C to cancel\n")

    completer = FriendCompleter(friends)
    session: PromptSession[str] = PromptSession(completer=completer)

    try:
        while True:
            result = session.prompt("Friend: ", complete_while_typing=True)

            if not result:
                return None

            # Accept exact names case-insensitively
            for friend in friends:
                if friend.name.lower() == result.strip().lower():
                    logger.info(f"User selected friend: {friend.name}")
                    return friend.id

            print(
                "❌ Unknown friend. Please select from the list or press Tab to complete."
            )

    except KeyboardInterrupt:
        print("\n⏭️  Cancelled")
        return None
    except EOFError:
        return None
