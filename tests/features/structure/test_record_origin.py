from bs4 import BeautifulSoup

from app.features.structure.services.heading_structure import HeadingStructureService
from app.features.structure.services.landmark_structure import LandmarkStructureService
from app.features.structure.services.record_origin import read_record_origin

HEADING_FROM_RECORD = (
    '<h1 data-a11y-record-table="content_elements" data-a11y-record-column="heading_level" '
    'data-a11y-record-uid="12">Welcome</h1>'
)


def first_tag(html):
    return BeautifulSoup(html, "html.parser").find(True)


class TestReadRecordOrigin:
    def test_builds_api_edit_link(self):
        origin = read_record_origin(first_tag(HEADING_FROM_RECORD), "Welcome")

        assert (origin.table, origin.column, origin.uid) == ("content_elements", "heading_level", 12)
        assert origin.edit_link.uri == "/api/v1/content-elements/12"
        assert origin.edit_link.label == "Welcome (content_elements:12, heading_level)"

    def test_host_edit_link_is_preferred(self):
        html = HEADING_FROM_RECORD.replace("<h1 ", '<h1 data-a11y-record-edit-link="/cms/edit/12" ')
        origin = read_record_origin(first_tag(html), "Welcome")

        assert origin.edit_link.uri == "/cms/edit/12"
        assert origin.edit_link.label == "Welcome (content_elements:12, heading_level)"

    def test_plain_element_has_no_origin(self):
        assert read_record_origin(first_tag("<h2>Plain</h2>")) is None

    def test_incomplete_or_invalid_attributes_have_no_origin(self):
        assert read_record_origin(first_tag('<h2 data-a11y-record-table="t" data-a11y-record-uid="3">x</h2>')) is None
        bad_uid = HEADING_FROM_RECORD.replace('data-a11y-record-uid="12"', 'data-a11y-record-uid="abc"')
        assert read_record_origin(first_tag(bad_uid)) is None


class TestStructureNodesCarryOrigin:
    def test_heading_node(self):
        tree, _ = HeadingStructureService.analyze(BeautifulSoup(HEADING_FROM_RECORD + "<h2>Plain</h2>", "html.parser"))

        assert tree[0].record.uid == 12
        assert tree[0].children[0].record is None

    def test_landmark_node(self):
        html = (
            '<nav aria-label="Primary" data-a11y-record-table="content_elements" '
            'data-a11y-record-column="landmark_role" data-a11y-record-uid="7"></nav><main></main>'
        )
        tree, _ = LandmarkStructureService.analyze(BeautifulSoup(html, "html.parser"))

        nav, main = tree
        assert nav.record.column == "landmark_role"
        assert nav.record.edit_link.label == "Primary (content_elements:7, landmark_role)"
        assert main.record is None
