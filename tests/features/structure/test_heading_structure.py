from bs4 import BeautifulSoup

from app.features.structure.services.heading_structure import (
    EMPTY_HEADING,
    MISSING_H1,
    MULTIPLE_H1,
    SKIPPED_LEVEL,
    HeadingStructureService,
)


def analyze(html):
    return HeadingStructureService.analyze(BeautifulSoup(html, "html.parser"))


def issue_counts(issues):
    return {issue.id: (issue.severity.value, issue.count) for issue in issues}


class TestHeadingStructure:
    def test_no_headings_reports_nothing(self):
        assert analyze("<p>No headings here</p>") == ([], [])

    def test_valid_outline(self):
        tree, issues = analyze("<h1>Title</h1><h2>Intro</h2><h3>Detail</h3><h2>More</h2>")

        assert issues == []
        assert len(tree) == 1
        title = tree[0]
        assert (title.level, title.text) == (1, "Title")
        assert [child.text for child in title.children] == ["Intro", "More"]
        assert title.children[0].children[0].text == "Detail"

    def test_missing_h1(self):
        tree, issues = analyze("<h2>Section</h2>")
        assert issue_counts(issues)[MISSING_H1] == ("error", 1)

    def test_multiple_h1_is_warning(self):
        tree, issues = analyze("<h1>One</h1><h1>Two</h1>")
        assert issue_counts(issues) == {MULTIPLE_H1: ("warning", 2)}
        assert all(MULTIPLE_H1 in node.errors for node in tree)

    def test_empty_heading(self):
        tree, issues = analyze("<h1>Title</h1><h2>  </h2>")
        assert issue_counts(issues) == {EMPTY_HEADING: ("error", 1)}
        assert tree[0].children[0].errors == [EMPTY_HEADING]

    def test_skipped_level(self):
        tree, issues = analyze("<h1>Title</h1><h3>Jumped</h3>")

        assert issue_counts(issues) == {SKIPPED_LEVEL: ("error", 1)}
        jumped = tree[0].children[0]
        assert jumped.skipped_levels == 1
        assert jumped.errors == [SKIPPED_LEVEL]

    def test_siblings_of_skipped_heading_are_flagged(self):
        tree, issues = analyze("<h1>Title</h1><h3>A</h3><h3>B</h3>")

        assert issue_counts(issues) == {SKIPPED_LEVEL: ("error", 2)}
        assert [child.skipped_levels for child in tree[0].children] == [1, 1]

    def test_going_back_up_is_not_a_skip(self):
        _, issues = analyze("<h1>T</h1><h2>A</h2><h3>B</h3><h4>C</h4><h2>D</h2>")
        assert issues == []

    def test_heading_text_is_collapsed(self):
        tree, _ = analyze("<h1>Hello <span>world</span></h1>")
        assert tree[0].text == "Hello world"
