import logging
from typing import Dict, List, Set, Tuple

from bs4 import BeautifulSoup, Tag

from app.features.structure.schemas.structure import HeadingNode, Severity, StructureIssue
from app.features.structure.services.issue_collector import IssueCollector
from app.features.structure.services.record_origin import read_record_origin

logger = logging.getLogger(__name__)

MISSING_H1 = "headingStructure.error.missingH1"
MULTIPLE_H1 = "headingStructure.error.multipleH1"
EMPTY_HEADING = "headingStructure.error.emptyHeadings"
SKIPPED_LEVEL = "headingStructure.error.skippedLevel"

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


class HeadingStructureService:
    """
    Builds the heading outline of a page and flags hierarchy errors.

    Checks:
    - the page has exactly one h1 (missing is an error, several a warning)
    - no heading is empty
    - no heading skips a level relative to its parent in the outline
    """

    @staticmethod
    def analyze(soup: BeautifulSoup) -> Tuple[List[HeadingNode], List[StructureIssue]]:
        headings = HeadingStructureService.select_elements(soup)
        if not headings:
            return [], []

        collector = IssueCollector()
        HeadingStructureService._validate_h1(headings, collector)
        HeadingStructureService._validate_content(headings, collector)
        tree = HeadingStructureService._build_tree(headings, collector)

        logger.info(f"Analyzed {len(headings)} headings")
        return tree, collector.aggregated()

    @staticmethod
    def select_elements(soup: BeautifulSoup) -> List[Tag]:
        return soup.find_all(HEADING_TAGS)

    @staticmethod
    def _validate_h1(headings: List[Tag], collector: IssueCollector) -> None:
        h1_elements = [h for h in headings if h.name == "h1"]
        if not h1_elements:
            collector.add_page_error(MISSING_H1, Severity.error)
        elif len(h1_elements) > 1:
            for h1 in h1_elements:
                collector.add(h1, MULTIPLE_H1, Severity.warning)

    @staticmethod
    def _validate_content(headings: List[Tag], collector: IssueCollector) -> None:
        for heading in headings:
            if not heading.get_text(strip=True):
                collector.add(heading, EMPTY_HEADING, Severity.error)

    @staticmethod
    def _build_tree(headings: List[Tag], collector: IssueCollector) -> List[HeadingNode]:
        root: List[HeadingNode] = []
        # (level, node) of the open outline branch
        stack: List[Tuple[int, HeadingNode]] = []
        # parent level -> child levels already reached by skipping
        skipped_combinations: Dict[int, Set[int]] = {}
        elements: List[Tuple[Tag, HeadingNode]] = []

        for element in headings:
            level = int(element.name[1])
            expected = stack[-1][0] + 1 if stack else 1
            direct_skips = max(0, level - expected)
            parent_level = next((lvl for lvl, _ in reversed(stack) if lvl < level), 0)

            if direct_skips > 0:
                skipped_combinations.setdefault(parent_level, set()).add(level)
                skipped = direct_skips
            elif level in skipped_combinations.get(parent_level, set()):
                # sibling of a heading that skipped: same gap, same error
                skipped = level - parent_level - 1
            else:
                skipped = 0

            if skipped > 0:
                collector.add(element, SKIPPED_LEVEL, Severity.error)

            text = element.get_text(" ", strip=True)
            node = HeadingNode(
                level=level,
                text=text,
                skipped_levels=skipped,
                record=read_record_origin(element, text),
            )
            elements.append((element, node))

            while stack and stack[-1][0] >= level:
                stack.pop()
            if stack:
                stack[-1][1].children.append(node)
            else:
                root.append(node)
            stack.append((level, node))

        for element, node in elements:
            node.errors = collector.errors_for(element)

        return root
