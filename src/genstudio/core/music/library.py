"""
Music library: lyrics conversation tree and generated songs.

Messages form a tree through ``parent_id``. Every user and assistant turn
is a node; the root is a user message with no parent.
"""

from collections import defaultdict
from typing import Any

from genstudio.core.store.models import Message, MessageRole, Settings, Song
from genstudio.core.store.service import LocalStore

MESSAGES = "messages"
SONGS = "songs"


class MusicLibrary:
    """
    Music-domain view over the local store.

    Example:
        >>> library = MusicLibrary(store)
        >>> root = library.create_message(role="user", content="a song about rain")
        >>> reply = library.create_message(role="assistant", parent_id=root.id, title="Rain")
        >>> [m.id for m in library.get_ancestors(reply.id)] == [root.id, reply.id]
        True
    """

    def __init__(self, store: LocalStore) -> None:
        self.store = store

    # Messages

    def create_message(
        self,
        role: MessageRole | str,
        content: str = "",
        parent_id: str | None = None,
        **lyrics: Any,
    ) -> Message:
        """
        Create a message node.

        Args:
            role: "user" or "assistant"
            content: Raw message text
            parent_id: Parent message ID (None for a root)
            **lyrics: Optional title, style, commentary, lyrics_body, duration

        Returns:
            The persisted message
        """
        data = {"role": role, "content": content, "parent_id": parent_id, **lyrics}
        return self.store.create(MESSAGES, data)

    def get_message(self, message_id: str) -> Message | None:
        return self.store.get(MESSAGES, message_id)

    def list_messages(self, include_deleted: bool = False) -> list[Message]:
        return self.store.list(MESSAGES, include_deleted=include_deleted)

    def get_ancestors(self, message_id: str) -> list[Message]:
        """
        Walk parent links from a message up to the root.

        Returns:
            Root-first path ending with the message itself; empty if unknown.
            A cycle or a dangling parent link ends the walk.
        """
        by_id = {m.id: m for m in self.store.all(MESSAGES)}
        path: list[Message] = []
        visited: set[str] = set()
        current = by_id.get(message_id)

        while current is not None:
            if current.id in visited:
                break
            visited.add(current.id)
            path.insert(0, current)
            if current.parent_id is None:
                break
            current = by_id.get(current.parent_id)

        return path

    def get_latest_leaf(self, message_id: str) -> Message | None:
        """
        Find the most recently created leaf below a message.

        Returns:
            The latest leaf descendant, the message itself if it has no
            children, or None if the message does not exist
        """
        messages = self.store.all(MESSAGES)
        by_id = {m.id: m for m in messages}
        root = by_id.get(message_id)
        if root is None:
            return None

        children: dict[str, list[Message]] = defaultdict(list)
        for m in messages:
            if m.parent_id is not None:
                children[m.parent_id].append(m)

        leaves: list[Message] = []
        stack = [root]
        visited: set[str] = set()
        while stack:
            node = stack.pop()
            if node.id in visited:
                continue
            visited.add(node.id)
            kids = children.get(node.id, [])
            if kids:
                stack.extend(kids)
            else:
                leaves.append(node)

        return max(leaves, key=lambda m: m.created_at, default=root)

    # Songs

    def songs_for_message(self, message_id: str, include_deleted: bool = False) -> list[Song]:
        return self.store.list(
            SONGS,
            include_deleted=include_deleted,
            where=lambda s: s.message_id == message_id,
        )

    def pinned_songs(self) -> list[Song]:
        return self.store.list(SONGS, where=lambda s: s.pinned)

    def pin_song(self, song_id: str, pinned: bool = True) -> bool:
        return self.store.set_pinned(SONGS, song_id, pinned) is not None

    def delete_song(self, song_id: str) -> bool:
        return self.store.soft_delete(SONGS, song_id)

    # Settings

    def get_settings(self) -> Settings:
        """Return stored settings, or defaults if none were ever saved."""
        return self.store.get_settings("settings") or Settings()
