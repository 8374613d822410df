from typing import Dict, List, Tuple

from app.features.structure.schemas.structure import Severity, StructureIssue


class IssueCollector:
    """Collects errors per element and aggregates them per error id."""

    def __init__(self):
        self._by_element: Dict[int, List[str]] = {}
        self._issues: Dict[str, Tuple[Severity, int]] = {}

    def add(self, element, error_id: str, severity: Severity) -> None:
        errors = self._by_element.setdefault(id(element), [])
        if error_id in errors:
            return
        errors.append(error_id)
        self._count(error_id, severity)

    def add_page_error(self, error_id: str, severity: Severity) -> None:
        self._count(error_id, severity)

    def _count(self, error_id: str, severity: Severity) -> None:
        _, count = self._issues.get(error_id, (severity, 0))
        self._issues[error_id] = (severity, count + 1)

    def errors_for(self, element) -> List[str]:
        return list(self._by_element.get(id(element), []))

    def aggregated(self) -> List[StructureIssue]:
        return [
            StructureIssue(id=error_id, severity=severity, count=count)
            for error_id, (severity, count) in self._issues.items()
        ]
