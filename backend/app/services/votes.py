from collections.abc import Iterable


class VoterSet:
    """Множество id проголосовавших; повторный голос снимает предыдущий."""

    def __init__(self, user_ids: Iterable[int] | None = None) -> None:
        self._ids: set[int] = set(user_ids or ())

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def toggle(self, user_id: int) -> bool:
        """Переключает голос. Возвращает True, если голос добавлен."""
        if user_id in self._ids:
            self._ids.discard(user_id)
            return False
        self._ids.add(user_id)
        return True

    def to_list(self) -> list[int]:
        return sorted(self._ids)


class Reactions:
    """Реакции на сообщение: emoji -> множество id пользователей."""

    def __init__(self, raw: dict[str, Iterable[int]] | None = None) -> None:
        self._by_emoji: dict[str, set[int]] = {
            emoji: set(user_ids) for emoji, user_ids in (raw or {}).items() if user_ids
        }

    def users(self, emoji: str) -> frozenset[int]:
        return frozenset(self._by_emoji.get(emoji, ()))

    def toggle(self, emoji: str, user_id: int) -> bool:
        """
        Добавляет или снимает реакцию пользователя.

        Пустые множества удаляются, чтобы в JSON не копились ключи без реакций.
        """
        users = self._by_emoji.setdefault(emoji, set())
        if user_id in users:
            users.discard(user_id)
            if not users:
                del self._by_emoji[emoji]
            return False
        users.add(user_id)
        return True

    def to_dict(self) -> dict[str, list[int]]:
        return {emoji: sorted(users) for emoji, users in self._by_emoji.items()}


def next_vote_count(votes: int, added: bool) -> int:
    """Новый счётчик голосов; при снятии голоса не уходит ниже нуля."""
    if added:
        return votes + 1
    return max(0, votes - 1)
