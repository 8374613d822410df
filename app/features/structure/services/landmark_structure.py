import logging
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from app.features.structure.schemas.structure import LandmarkNode, LandmarkRole, Severity, StructureIssue
from app.features.structure.services.issue_collector import IssueCollector
from app.features.structure.services.record_origin import read_record_origin

logger = logging.getLogger(__name__)

MISSING_MAIN = "landmarkStructure.error.missingMain"
DUPLICATE_MAIN = "landmarkStructure.error.duplicateMain"
DUPLICATE_SAME_LABEL = "landmarkStructure.error.duplicateSameLabel"
MULTIPLE_UNLABELED = "landmarkStructure.error.multipleUnlabeledLandmarks"

LANDMARK_ROLES = {role.value for role in LandmarkRole}

IMPLICIT_ROLES = {
    "main": "main",
    "nav": "navigation",
    "aside": "complementary",
    "header": "banner",
    "footer": "contentinfo",
    "form": "form",
}

# header/footer inside these are not page-level banner/contentinfo
SECTIONING_TAGS = {"article", "aside", "footer", "header", "main", "nav", "section"}


class LandmarkStructureService:
    """
    Builds the landmark tree of a page and flags landmark errors:
    missing or duplicate main, landmarks sharing a label, and several
    unlabelled landmarks of the same role.
    """

    @staticmethod
    def analyze(soup: BeautifulSoup) -> Tuple[List[LandmarkNode], List[StructureIssue]]:
        elements = LandmarkStructureService.select_elements(soup)
        if not elements:
            return [], []

        landmarks = [
            (
                element,
                LandmarkStructureService.get_role(element, soup),
                LandmarkStructureService.get_label(element, soup),
            )
            for element in elements
        ]

        collector = IssueCollector()
        LandmarkStructureService._validate_main(landmarks, collector)
        LandmarkStructureService._validate_label_uniqueness(landmarks, collector)
        LandmarkStructureService._validate_unlabeled_groups(landmarks, collector)

        logger.info(f"Analyzed {len(landmarks)} landmarks")
        return LandmarkStructureService._build_tree(landmarks, collector), collector.aggregated()

    @staticmethod
    def select_elements(soup: BeautifulSoup) -> List[Tag]:
        return [
            element
            for element in soup.find_all(True)
            if LandmarkStructureService.get_role(element, soup)
        ]

    @staticmethod
    def get_role(element: Tag, soup: BeautifulSoup) -> str:
        explicit_role = (element.get("role") or "").strip()
        if explicit_role:
            return explicit_role if explicit_role in LANDMARK_ROLES else ""

        tag = element.name
        if tag == "section":
            return "region" if LandmarkStructureService.get_label(element, soup) else ""
        if tag in ("header", "footer") and LandmarkStructureService._inside_sectioning(element):
            return ""
        return IMPLICIT_ROLES.get(tag, "")

    @staticmethod
    def get_label(element: Tag, soup: BeautifulSoup) -> str:
        aria_label = (element.get("aria-label") or "").strip()
        if aria_label:
            return aria_label

        labelled_by = (element.get("aria-labelledby") or "").split()
        texts = []
        for ref_id in labelled_by:
            referenced = soup.find(id=ref_id)
            if referenced is not None:
                text = referenced.get_text(" ", strip=True)
                if text:
                    texts.append(text)
        return " ".join(texts)

    @staticmethod
    def _inside_sectioning(element: Tag) -> bool:
        return any(parent.name in SECTIONING_TAGS for parent in element.parents)

    @staticmethod
    def _validate_main(landmarks, collector: IssueCollector) -> None:
        mains = [element for element, role, _ in landmarks if role == "main"]
        if not mains:
            collector.add_page_error(MISSING_MAIN, Severity.error)
        elif len(mains) > 1:
            for element in mains:
                collector.add(element, DUPLICATE_MAIN, Severity.error)

    @staticmethod
    def _validate_label_uniqueness(landmarks, collector: IssueCollector) -> None:
        label_groups: Dict[str, List[Tag]] = {}
        for element, _, label in landmarks:
            if label:
                label_groups.setdefault(label, []).append(element)

        for group in label_groups.values():
            if len(group) >= 2:
                for element in group:
                    collector.add(element, DUPLICATE_SAME_LABEL, Severity.error)

    @staticmethod
    def _validate_unlabeled_groups(landmarks, collector: IssueCollector) -> None:
        role_groups: Dict[str, List[Tuple[Tag, str]]] = {}
        for element, role, label in landmarks:
            role_groups.setdefault(role, []).append((element, label))

        for role, group in role_groups.items():
            if role == "main" or len(group) < 2:
                continue
            unlabeled = [element for element, label in group if not label]
            if len(unlabeled) > 1:
                for element in unlabeled:
                    collector.add(element, MULTIPLE_UNLABELED, Severity.warning)

    @staticmethod
    def _build_tree(landmarks, collector: IssueCollector) -> List[LandmarkNode]:
        nodes: Dict[int, LandmarkNode] = {}
        for element, role, label in landmarks:
            nodes[id(element)] = LandmarkNode(
                role=role,
                label=label,
                tag=element.name,
                errors=collector.errors_for(element),
                record=read_record_origin(element, label or role),
            )

        root: List[LandmarkNode] = []
        for element, _, _ in landmarks:
            parent = LandmarkStructureService._closest_landmark(element, nodes)
            if parent is None:
                root.append(nodes[id(element)])
            else:
                parent.children.append(nodes[id(element)])
        return root

    @staticmethod
    def _closest_landmark(element: Tag, nodes: Dict[int, LandmarkNode]) -> Optional[LandmarkNode]:
        for parent in element.parents:
            if id(parent) in nodes:
                return nodes[id(parent)]
        return None
