"""
Integration tests for newsletter drafting and export.

Tests newsletter services against an in-memory database for:
- Create / update / delete with per-user ownership
- Adding, moving, removing and reordering articles
- HTML export and logo uploads
"""

import os
from uuid import uuid4

import pytest

from curator.models import Article, Newsletter, NewsletterArticle
from curator.services.newsletters import (
    add_article_to_newsletter,
    create_newsletter,
    delete_newsletter,
    export_newsletter,
    get_newsletter,
    list_newsletters,
    remove_article_from_newsletter,
    render_newsletter_html,
    reorder_articles,
    save_newsletter_logo,
    update_newsletter,
)
from tests.fixtures.sample_data import create_article


@pytest.fixture
def articles(db_session):
    rows = [
        create_article(url=f"https://example.com/n{i}", title=f"Story {i}", summary=f"Summary {i}")
        for i in range(3)
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


@pytest.fixture
def newsletter(db_session):
    return create_newsletter(db_session, "user_a", "Weekly Picks", intro="Hello", outro="Bye")


def _titles(db_session, newsletter_id):
    db_session.expire_all()
    loaded = get_newsletter(db_session, "user_a", newsletter_id)
    return [link.article.title for link in loaded.article_links]


class TestNewsletterCrud:

    def test_create_uses_default_styling(self, db_session, newsletter):
        stored = db_session.query(Newsletter).one()
        assert stored.title == "Weekly Picks"
        assert stored.header_color == "#4f46e5"
        assert stored.text_color == "#1f2937"
        assert stored.user_id == "user_a"

    def test_blank_title_rejected(self, db_session):
        with pytest.raises(ValueError, match="title is required"):
            create_newsletter(db_session, "user_a", "   ")
        assert db_session.query(Newsletter).count() == 0

    def test_list_is_per_user(self, db_session, newsletter):
        create_newsletter(db_session, "user_b", "Other")

        assert [n.title for n in list_newsletters(db_session, "user_a")] == ["Weekly Picks"]
        assert get_newsletter(db_session, "user_b", newsletter.id) is None

    def test_update_changes_only_editable_fields(self, db_session, newsletter):
        original_id = newsletter.id
        assert update_newsletter(db_session, "user_a", newsletter.id, {
            'title': "Renamed",
            'header_color': "#000000",
            'user_id': "user_b",
        }) is True

        stored = db_session.query(Newsletter).one()
        assert stored.title == "Renamed"
        assert stored.header_color == "#000000"
        assert stored.user_id == "user_a"
        assert stored.id == original_id

    def test_update_rejects_blank_title(self, db_session, newsletter):
        with pytest.raises(ValueError):
            update_newsletter(db_session, "user_a", newsletter.id, {'title': ""})
        assert db_session.query(Newsletter).one().title == "Weekly Picks"

    def test_update_other_users_newsletter(self, db_session, newsletter):
        assert update_newsletter(db_session, "user_b", newsletter.id, {'title': "Hijacked"}) is False
        assert db_session.query(Newsletter).one().title == "Weekly Picks"

    def test_delete_removes_links_but_keeps_articles(self, db_session, newsletter, articles):
        add_article_to_newsletter(db_session, "user_a", newsletter.id, articles[0].id)

        assert delete_newsletter(db_session, "user_b", newsletter.id) is False
        assert delete_newsletter(db_session, "user_a", newsletter.id) is True

        assert db_session.query(Newsletter).count() == 0
        assert db_session.query(NewsletterArticle).count() == 0
        assert db_session.query(Article).count() == 3


class TestNewsletterArticles:

    def test_append_in_order(self, db_session, newsletter, articles):
        positions = [
            add_article_to_newsletter(db_session, "user_a", newsletter.id, article.id)
            for article in articles
        ]

        assert positions == [0, 1, 2]
        assert _titles(db_session, newsletter.id) == ["Story 0", "Story 1", "Story 2"]

    def test_adding_again_moves_instead_of_duplicating(self, db_session, newsletter, articles):
        for article in articles:
            add_article_to_newsletter(db_session, "user_a", newsletter.id, article.id)

        add_article_to_newsletter(db_session, "user_a", newsletter.id, articles[0].id)

        assert db_session.query(NewsletterArticle).count() == 3
        assert _titles(db_session, newsletter.id) == ["Story 1", "Story 2", "Story 0"]

    def test_explicit_position(self, db_session, newsletter, articles):
        add_article_to_newsletter(db_session, "user_a", newsletter.id, articles[0].id, position=5)
        assert db_session.query(NewsletterArticle).one().position == 5

    def test_other_users_article_rejected(self, db_session, newsletter):
        foreign = create_article(user_id="user_b")
        db_session.add(foreign)
        db_session.commit()

        with pytest.raises(LookupError, match="Article not found"):
            add_article_to_newsletter(db_session, "user_a", newsletter.id, foreign.id)

    def test_other_users_newsletter_rejected(self, db_session, newsletter, articles):
        with pytest.raises(LookupError, match="Newsletter not found"):
            add_article_to_newsletter(db_session, "user_b", newsletter.id, articles[0].id)

    def test_remove(self, db_session, newsletter, articles):
        add_article_to_newsletter(db_session, "user_a", newsletter.id, articles[0].id)

        assert remove_article_from_newsletter(db_session, "user_a", newsletter.id, articles[1].id) is False
        assert remove_article_from_newsletter(db_session, "user_a", newsletter.id, articles[0].id) is True
        assert db_session.query(NewsletterArticle).count() == 0

    def test_reorder(self, db_session, newsletter, articles):
        for article in articles:
            add_article_to_newsletter(db_session, "user_a", newsletter.id, article.id)

        new_order = [articles[2].id, uuid4(), articles[0].id, articles[1].id]
        assert reorder_articles(db_session, "user_a", newsletter.id, new_order) is True

        assert _titles(db_session, newsletter.id) == ["Story 2", "Story 0", "Story 1"]

    def test_reorder_other_users_newsletter(self, db_session, newsletter):
        assert reorder_articles(db_session, "user_b", newsletter.id, []) is False

    def test_deleting_article_drops_its_link(self, db_session, newsletter, articles):
        add_article_to_newsletter(db_session, "user_a", newsletter.id, articles[0].id)

        db_session.query(Article).filter(Article.id == articles[0].id).delete()
        db_session.commit()

        assert db_session.query(NewsletterArticle).count() == 0


class TestExport:

    def test_html_contains_articles_in_order(self, db_session, newsletter, articles):
        add_article_to_newsletter(db_session, "user_a", newsletter.id, articles[1].id)
        add_article_to_newsletter(db_session, "user_a", newsletter.id, articles[0].id)

        html = export_newsletter(db_session, "user_a", newsletter.id)

        assert html.startswith("<!DOCTYPE html>")
        assert "Weekly Picks" in html
        assert "Hello" in html and "Bye" in html
        assert html.index("Story 1") < html.index("Story 0")
        assert 'href="https://example.com/n0"' in html
        assert "Read More &rarr;" in html

    def test_user_text_is_escaped(self, db_session, newsletter):
        update_newsletter(db_session, "user_a", newsletter.id, {'intro': "<script>alert(1)</script>"})

        html = export_newsletter(db_session, "user_a", newsletter.id)

        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_relative_logo_gets_base_url(self):
        newsletter = Newsletter(
            title="T", header_color="#111111", text_color="#222222", logo_url="/uploads/logo.png"
        )

        html = render_newsletter_html(newsletter, base_url="https://curator.example")

        assert 'src="https://curator.example/uploads/logo.png"' in html

    def test_missing_newsletter(self, db_session, newsletter):
        with pytest.raises(LookupError):
            export_newsletter(db_session, "user_b", newsletter.id)


class TestLogoUpload:

    def test_saves_file(self, tmp_path):
        url = save_newsletter_logo("user_a", "brand.PNG", b"\x89PNG", str(tmp_path))

        assert url.startswith("/uploads/logo-user_a-")
        assert url.endswith(".png")
        stored = tmp_path / os.path.basename(url)
        assert stored.read_bytes() == b"\x89PNG"

    def test_rejects_unknown_type(self, tmp_path):
        with pytest.raises(ValueError, match="Unsupported logo type"):
            save_newsletter_logo("user_a", "payload.exe", b"MZ", str(tmp_path))

    def test_rejects_empty_upload(self, tmp_path):
        with pytest.raises(ValueError, match="No file provided"):
            save_newsletter_logo("user_a", "logo.png", b"", str(tmp_path))

    def test_user_id_cannot_escape_upload_dir(self, tmp_path):
        url = save_newsletter_logo("../../etc", "logo.png", b"x", str(tmp_path))

        assert "/" not in url[len("/uploads/"):]
        assert len(list(tmp_path.iterdir())) == 1
