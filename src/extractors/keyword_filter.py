import logging
from dataclasses import dataclass
from typing import AbstractSet, Any, Callable, FrozenSet, Iterable, Optional, Set, Tuple

from outputs.exporters import get_message_for_person_list_shown_summary

logger = logging.getLogger("addressbook.filter")

Persons = Tuple[Any, ...]


def _included(matched: Persons) -> Set[int]:
    return {id(p) for p in matched}


def _extend(
    all_persons: Iterable[Any],
    matched: Persons,
    is_match: Callable[[Any], bool],
) -> Persons:
    seen = _included(matched)
    found = []
    for person in all_persons:
        if id(person) not in seen and is_match(person):
            seen.add(id(person))
            found.append(person)
    return matched + tuple(found)


def _words_in_name(person: Any) -> Set[str]:
    words = getattr(person, "words_in_name", None)
    if callable(words):
        return set(words())
    return set(str(person.name).split())


def match_by_name(all_persons: Iterable[Any], keywords: AbstractSet[str], matched: Persons = ()) -> Persons:
    return _extend(all_persons, matched, lambda p: not keywords.isdisjoint(_words_in_name(p)))


def match_by_tags(all_persons: Iterable[Any], keywords: AbstractSet[str], matched: Persons = ()) -> Persons:
    return _extend(all_persons, matched, lambda p: not keywords.isdisjoint(p.tags))


def match_by_phone(all_persons: Iterable[Any], keywords: AbstractSet[str], matched: Persons = ()) -> Persons:
    return _extend(all_persons, matched, lambda p: str(p.phone) in keywords)


def match_by_email(all_persons: Iterable[Any], keywords: AbstractSet[str], matched: Persons = ()) -> Persons:
    return _extend(all_persons, matched, lambda p: p.email in keywords)


PASSES = (
    ("name", match_by_name),
    ("tags", match_by_tags),
    ("phone", match_by_phone),
    ("email", match_by_email),
)


def find_persons(all_persons: Optional[Iterable[Any]], keywords: Optional[AbstractSet[str]]) -> Persons:
    """
    Return every person whose name words, tags, phone or email match any keyword.

    Matching is exact and case-sensitive. Results are ordered by the first pass
    that matched (name, tags, phone, email) and then by input order; each
    person appears once.
    """
    if keywords is None:
        raise ValueError("keywords must not be None")
    persons = tuple(all_persons or ())
    matched: Persons = ()
    if not keywords or not persons:
        return matched
    for field_name, match in PASSES:
        before = len(matched)
        matched = match(persons, keywords, matched)
        logger.debug("%s pass matched %d new persons", field_name, len(matched) - before)
    return matched


@dataclass(frozen=True)
class CommandResult:
    feedback_to_user: str
    relevant_persons: Persons = ()


class FindCommand:
    """
    Finds and lists all persons whose name, tags, phone or email match any of
    the argument keywords. Keyword matching is case sensitive.
    """

    COMMAND_WORD = "find"
    MESSAGE_USAGE = (
        COMMAND_WORD + ":\n"
        "Finds all persons whose names, tags, phone numbers or emails match any of "
        "the specified keywords (case-sensitive) and displays them as a list with index numbers.\n\t"
        "Parameters: KEYWORD [MORE_KEYWORDS]...\n\t"
        "Example: " + COMMAND_WORD + " alice friend 91234567"
    )

    def __init__(self, keywords: Optional[Iterable[str]]):
        if keywords is None:
            raise ValueError("keywords must not be None")
        self._keywords: FrozenSet[str] = frozenset(keywords)

    @property
    def keywords(self) -> Set[str]:
        """Copy of the keywords; changing it does not affect the command."""
        return set(self._keywords)

    def execute(self, address_book) -> CommandResult:
        persons_found = find_persons(address_book.get_all_persons(), self._keywords)
        logger.info("find %s matched %d persons", sorted(self._keywords), len(persons_found))
        return CommandResult(get_message_for_person_list_shown_summary(persons_found), persons_found)


def parse_find_arguments(args: Optional[str]) -> FrozenSet[str]:
    keywords = (args or "").split()
    if not keywords:
        raise ValueError(f"Invalid command format!\n{FindCommand.MESSAGE_USAGE}")
    return frozenset(keywords)
