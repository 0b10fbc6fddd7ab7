"""Source-set resolver for runtime library catalogs."""

import logging
from dataclasses import dataclass, field

from cxxforge.runtime.library import LibraryDescriptor
from cxxforge.runtime.models.target import TargetDescriptor
from cxxforge.runtime.rules import AddFlags, Exclude, FlagPlacement, Rule


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedEntry:
    """Catalog entry retained for a target, with the flags its rules added."""

    source: str
    leading_flags: tuple[str, ...] = ()
    target_flags: tuple[str, ...] = ()


@dataclass
class ResolvedSourceSet:
    """Outcome of resolving one catalog against one target.

    ``entries`` keeps catalog order; ``excluded`` maps each dropped entry to
    the name of the rule that dropped it.
    """

    library: LibraryDescriptor
    target: TargetDescriptor
    entries: list[ResolvedEntry] = field(default_factory=list)
    excluded: dict[str, str] = field(default_factory=dict)

    @property
    def sources(self) -> list[str]:
        return [entry.source for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)


class SourceSetResolver:
    """Filter a library catalog against a target using the library's rule table."""

    def __init__(self) -> None:
        """Initialize source-set resolver."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def resolve(
        self, library: LibraryDescriptor, target: TargetDescriptor
    ) -> ResolvedSourceSet:
        """Resolve the subset of the library's catalog compiled for target.

        Args:
            library: Library whose catalog and rules are applied
            target: Target platform and threading mode

        Returns:
            ResolvedSourceSet: Retained entries in catalog order plus the
            exclusions that were applied
        """
        active_rules = self.active_rules(library, target)
        self.logger.debug(
            "Resolving %s for %s with rules: %s",
            library.task,
            target.triple,
            [rule.name for rule in active_rules],
        )

        result = ResolvedSourceSet(library=library, target=target)
        for source in library.catalog.files:
            entry, excluded_by = self._apply_rules(source, active_rules)
            if excluded_by is not None:
                result.excluded[source] = excluded_by
                continue
            result.entries.append(entry)

        self.logger.info(
            "Resolved %d of %d %s sources for %s",
            len(result.entries),
            len(library.catalog),
            library.task,
            target.triple,
        )
        return result

    def active_rules(
        self, library: LibraryDescriptor, target: TargetDescriptor
    ) -> list[Rule]:
        """Rules whose target condition holds, in table order."""
        return [rule for rule in library.rules if rule.applies(target)]

    def _apply_rules(
        self, source: str, rules: list[Rule]
    ) -> tuple[ResolvedEntry, str | None]:
        leading: list[str] = []
        target_flags: list[str] = []

        for rule in rules:
            for effect in rule.effects:
                if isinstance(effect, Exclude):
                    if effect.matches(source):
                        return ResolvedEntry(source), rule.name
                elif isinstance(effect, AddFlags):
                    if effect.placement is FlagPlacement.LEADING:
                        leading.extend(effect.flags)
                    else:
                        target_flags.extend(effect.flags)

        return (
            ResolvedEntry(
                source=source,
                leading_flags=tuple(leading),
                target_flags=tuple(target_flags),
            ),
            None,
        )


def create_source_set_resolver() -> SourceSetResolver:
    """Create source-set resolver instance.

    Returns:
        SourceSetResolver: New source-set resolver
    """
    return SourceSetResolver()
