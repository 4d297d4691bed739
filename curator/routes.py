"""
Flask Routes for Feed Curator

Includes:
- Health check endpoint
- Cron endpoint for the system-wide feed refresh
- Per-user feed refresh, feed management and article routes
- Curated category subscriptions
- Newsletters, social post drafts, post scheduling and tone profile
"""

import logging
import os
from datetime import datetime, timezone
from uuid import UUID

from flask import Blueprint, current_app, jsonify, request, send_from_directory

from curator.auth import AuthorizationError, require_user_id
from curator.models import (
    PostPlatform, PostStatus, article_to_dict, feed_to_dict, newsletter_to_dict, post_to_dict,
    tone_profile_to_dict,
)
from curator.services.articles import list_articles, toggle_article_like
from curator.services.categories import (
    CATEGORIES, get_user_categories, subscribe_to_category, unsubscribe_from_category
)
from curator.services.feeds import list_feeds, add_feed, remove_feed
from curator.services.newsletters import (
    add_article_to_newsletter, create_newsletter, delete_newsletter, export_newsletter,
    get_newsletter, list_newsletters, remove_article_from_newsletter, reorder_articles,
    save_newsletter_logo, update_newsletter,
)
from curator.services.posts import delete_post, list_posts, list_upcoming_posts, save_post, update_post
from curator.services.scheduler import (
    cancel_scheduled_post, get_all_posts, get_calendar_stats, get_scheduled_posts,
    mark_post_published, month_bounds, reschedule_post, schedule_post,
)
from curator.services.social import PostOptions, generate_social_posts
from curator.services.tone import get_tone_profile, save_tone_profile

logger = logging.getLogger(__name__)

# Create blueprint
main = Blueprint('main', __name__)


def _extension(name: str):
    return current_app.extensions['curator'][name]


def _session():
    return _extension('session_factory')()


def _parse_uuid(value: str):
    try:
        return UUID(value)
    except ValueError:
        return None


def _parse_enum(enum_cls, value):
    """Enum member from its value; None for an empty value."""
    if not value:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        raise ValueError(f"Invalid {enum_cls.__name__}: {value}")


def _parse_datetime(value):
    """ISO 8601 string to an aware UTC datetime; naive input is taken as UTC."""
    if not value:
        return None
    if not isinstance(value, str):
        raise ValueError("Dates must be ISO 8601 strings")
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        raise ValueError(f"Invalid date: {value}")
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@main.errorhandler(AuthorizationError)
def handle_unauthorized(e):
    return jsonify({'success': False, 'error': str(e)}), 401


@main.route('/health')
def health_check():
    """Health check endpoint."""
    return {'status': 'healthy', 'timestamp': datetime.now(timezone.utc).isoformat()}


# =============================================================================
# Refresh Routes
# =============================================================================

@main.route('/api/cron')
def cron_refresh():
    """
    Refresh all active feeds for all users.

    Called by an external scheduler; no caller authorization.
    """
    try:
        logger.info("Cron job started: Refreshing ALL feeds...")
        result = _extension('ingestor').refresh_all_feeds()
        logger.info(f"Cron job finished: {result.count} new articles")

        return jsonify({
            'success': True,
            'message': f"Processed {result.count} new articles.",
            'details': result.to_dict(),
        })
    except Exception as e:
        logger.error(f"Cron job failed: {e}", exc_info=True)
        return jsonify({'success': False, 'error': str(e)}), 500


@main.route('/feeds/refresh', methods=['POST'])
def refresh_my_feeds():
    """Refresh the caller's active feeds."""
    user_id = require_user_id()
    result = _extension('ingestor').refresh_user_feeds(user_id)
    return jsonify(result.to_dict())


# =============================================================================
# Feed Routes
# =============================================================================

@main.route('/feeds')
def get_feeds():
    user_id = require_user_id()
    session = _session()
    try:
        return jsonify({'feeds': [feed_to_dict(f) for f in list_feeds(session, user_id)]})
    finally:
        session.close()


@main.route('/feeds', methods=['POST'])
def create_feed():
    """
    Subscribe the caller to a feed URL.

    Validates the URL is a valid RSS/Atom feed before saving.
    """
    user_id = require_user_id()
    data = request.get_json(silent=True) or {}
    session = _session()
    try:
        result = add_feed(
            session,
            user_id,
            data.get('url', ''),
            category=data.get('category') or None,
            fetch_title=_extension('feed_title'),
        )
        if not result['success']:
            return jsonify(result), 400
        return jsonify(result), 201
    except Exception as e:
        logger.error(f"Error adding feed: {e}")
        session.rollback()
        return jsonify({'success': False, 'error': 'Failed to parse or add feed.'}), 500
    finally:
        session.close()


@main.route('/feeds/<feed_id>', methods=['DELETE'])
def delete_feed(feed_id: str):
    """Remove one of the caller's feeds. Its articles are kept."""
    user_id = require_user_id()
    feed_uuid = _parse_uuid(feed_id)
    if feed_uuid is None:
        return jsonify({'success': False, 'error': 'Feed not found'}), 404

    session = _session()
    try:
        if not remove_feed(session, user_id, feed_uuid):
            return jsonify({'success': False, 'error': 'Feed not found'}), 404
        return jsonify({'success': True})
    except Exception as e:
        session.rollback()
        return jsonify({'success': False, 'error': str(e)}), 500
    finally:
        session.close()


# =============================================================================
# Article Routes
# =============================================================================

@main.route('/articles')
def get_articles():
    user_id = require_user_id()
    session = _session()
    try:
        return jsonify({'articles': [article_to_dict(a) for a in list_articles(session, user_id)]})
    finally:
        session.close()


@main.route('/articles/<article_id>/like', methods=['POST'])
def like_article(article_id: str):
    """Toggle the like flag on one of the caller's articles."""
    user_id = require_user_id()
    article_uuid = _parse_uuid(article_id)
    if article_uuid is None:
        return jsonify({'success': False, 'error': 'Article not found'}), 404

    session = _session()
    try:
        is_liked = toggle_article_like(session, user_id, article_uuid)
        return jsonify({'success': True, 'is_liked': is_liked})
    except LookupError as e:
        return jsonify({'success': False, 'error': str(e)}), 404
    finally:
        session.close()


# =============================================================================
# Category Routes
# =============================================================================

@main.route('/categories')
def get_categories():
    return jsonify({'categories': [c.to_dict() for c in CATEGORIES]})


@main.route('/categories/subscribed')
def get_subscribed_categories():
    user_id = require_user_id()
    session = _session()
    try:
        return jsonify({'categories': get_user_categories(session, user_id)})
    finally:
        session.close()


@main.route('/categories/<category_id>/subscription', methods=['POST'])
def subscribe_category(category_id: str):
    user_id = require_user_id()
    session = _session()
    try:
        result = subscribe_to_category(
            session, user_id, category_id, fetch_title=_extension('feed_title')
        )
        if not result['success']:
            return jsonify(result), 409
        return jsonify(result)
    except LookupError as e:
        return jsonify({'success': False, 'error': str(e)}), 404
    finally:
        session.close()


@main.route('/categories/<category_id>/subscription', methods=['DELETE'])
def unsubscribe_category(category_id: str):
    user_id = require_user_id()
    session = _session()
    try:
        return jsonify(unsubscribe_from_category(session, user_id, category_id))
    finally:
        session.close()


# =============================================================================
# Newsletter Routes
# =============================================================================

@main.route('/newsletters')
def get_newsletters():
    user_id = require_user_id()
    session = _session()
    try:
        return jsonify({'newsletters': [newsletter_to_dict(n) for n in list_newsletters(session, user_id)]})
    finally:
        session.close()


@main.route('/newsletters', methods=['POST'])
def new_newsletter():
    user_id = require_user_id()
    data = request.get_json(silent=True) or {}
    session = _session()
    try:
        newsletter = create_newsletter(
            session, user_id, data.get('title', ''), intro=data.get('intro'), outro=data.get('outro')
        )
        return jsonify({'success': True, 'newsletter': newsletter_to_dict(newsletter)}), 201
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    finally:
        session.close()


@main.route('/newsletters/<newsletter_id>')
def get_one_newsletter(newsletter_id: str):
    user_id = require_user_id()
    newsletter_uuid = _parse_uuid(newsletter_id)
    session = _session()
    try:
        newsletter = newsletter_uuid and get_newsletter(session, user_id, newsletter_uuid)
        if not newsletter:
            return jsonify({'success': False, 'error': 'Newsletter not found'}), 404
        return jsonify({'newsletter': newsletter_to_dict(newsletter)})
    finally:
        session.close()


@main.route('/newsletters/<newsletter_id>', methods=['PATCH'])
def edit_newsletter(newsletter_id: str):
    """Update title, intro/outro and styling fields."""
    user_id = require_user_id()
    newsletter_uuid = _parse_uuid(newsletter_id)
    if newsletter_uuid is None:
        return jsonify({'success': False, 'error': 'Newsletter not found'}), 404

    session = _session()
    try:
        if not update_newsletter(session, user_id, newsletter_uuid, request.get_json(silent=True) or {}):
            return jsonify({'success': False, 'error': 'Newsletter not found'}), 404
        return jsonify({'success': True})
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    finally:
        session.close()


@main.route('/newsletters/<newsletter_id>', methods=['DELETE'])
def remove_newsletter(newsletter_id: str):
    user_id = require_user_id()
    newsletter_uuid = _parse_uuid(newsletter_id)
    if newsletter_uuid is None:
        return jsonify({'success': False, 'error': 'Newsletter not found'}), 404

    session = _session()
    try:
        if not delete_newsletter(session, user_id, newsletter_uuid):
            return jsonify({'success': False, 'error': 'Newsletter not found'}), 404
        return jsonify({'success': True})
    finally:
        session.close()


@main.route('/newsletters/<newsletter_id>/articles', methods=['POST'])
def add_newsletter_article(newsletter_id: str):
    """Add an article (JSON article_id, optional position) to a newsletter."""
    user_id = require_user_id()
    data = request.get_json(silent=True) or {}
    newsletter_uuid = _parse_uuid(newsletter_id)
    article_uuid = _parse_uuid(str(data.get('article_id', '')))
    if newsletter_uuid is None:
        return jsonify({'success': False, 'error': 'Newsletter not found'}), 404
    if article_uuid is None:
        return jsonify({'success': False, 'error': 'Article not found'}), 404

    position = data.get('position')
    if position is not None and (isinstance(position, bool) or not isinstance(position, int)):
        return jsonify({'success': False, 'error': 'position must be an integer'}), 400

    session = _session()
    try:
        position = add_article_to_newsletter(session, user_id, newsletter_uuid, article_uuid, position)
        return jsonify({'success': True, 'position': position})
    except LookupError as e:
        return jsonify({'success': False, 'error': str(e)}), 404
    finally:
        session.close()


@main.route('/newsletters/<newsletter_id>/articles/<article_id>', methods=['DELETE'])
def remove_newsletter_article(newsletter_id: str, article_id: str):
    user_id = require_user_id()
    newsletter_uuid = _parse_uuid(newsletter_id)
    article_uuid = _parse_uuid(article_id)
    if newsletter_uuid is None or article_uuid is None:
        return jsonify({'success': False, 'error': 'Not found'}), 404

    session = _session()
    try:
        if not remove_article_from_newsletter(session, user_id, newsletter_uuid, article_uuid):
            return jsonify({'success': False, 'error': 'Not found'}), 404
        return jsonify({'success': True})
    finally:
        session.close()


@main.route('/newsletters/<newsletter_id>/articles/order', methods=['PUT'])
def reorder_newsletter_articles(newsletter_id: str):
    """Reorder articles from a JSON list of article_ids."""
    user_id = require_user_id()
    newsletter_uuid = _parse_uuid(newsletter_id)
    if newsletter_uuid is None:
        return jsonify({'success': False, 'error': 'Newsletter not found'}), 404

    raw_ids = (request.get_json(silent=True) or {}).get('article_ids')
    if not isinstance(raw_ids, list):
        return jsonify({'success': False, 'error': 'article_ids must be a list'}), 400
    article_ids = [_parse_uuid(str(value)) for value in raw_ids]
    if None in article_ids:
        return jsonify({'success': False, 'error': 'article_ids must be UUIDs'}), 400

    session = _session()
    try:
        if not reorder_articles(session, user_id, newsletter_uuid, article_ids):
            return jsonify({'success': False, 'error': 'Newsletter not found'}), 404
        return jsonify({'success': True})
    finally:
        session.close()


@main.route('/newsletters/<newsletter_id>/export')
def export_newsletter_html(newsletter_id: str):
    user_id = require_user_id()
    newsletter_uuid = _parse_uuid(newsletter_id)
    if newsletter_uuid is None:
        return jsonify({'success': False, 'error': 'Newsletter not found'}), 404

    session = _session()
    try:
        return jsonify({'success': True, 'html': export_newsletter(session, user_id, newsletter_uuid)})
    except LookupError as e:
        return jsonify({'success': False, 'error': str(e)}), 404
    finally:
        session.close()


@main.route('/newsletters/logo', methods=['POST'])
def upload_logo():
    """Store an uploaded logo (multipart field `logo`) and return its URL."""
    user_id = require_user_id()
    upload = request.files.get('logo')
    if upload is None:
        return jsonify({'success': False, 'error': 'No file provided'}), 400
    try:
        logo_url = save_newsletter_logo(
            user_id, upload.filename, upload.read(), current_app.config['UPLOAD_DIR']
        )
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    return jsonify({'success': True, 'logo_url': logo_url}), 201


@main.route('/uploads/<path:filename>')
def uploaded_file(filename: str):
    return send_from_directory(os.path.abspath(current_app.config['UPLOAD_DIR']), filename)


# =============================================================================
# Social Post Routes
# =============================================================================

@main.route('/articles/<article_id>/social-posts', methods=['POST'])
def create_social_posts(article_id: str):
    """
    Draft a Twitter thread and a LinkedIn post for an article.

    JSON body may set linkedin_tone, linkedin_style, twitter_tone and
    twitter_style; a tone of "custom" uses the saved tone profile.
    """
    user_id = require_user_id()
    article_uuid = _parse_uuid(article_id)
    if article_uuid is None:
        return jsonify({'success': False, 'error': 'Article not found'}), 404

    session = _session()
    try:
        result = generate_social_posts(
            session,
            user_id,
            article_uuid,
            _extension('social_writer'),
            PostOptions.from_dict(request.get_json(silent=True)),
        )
        return jsonify({
            'success': True,
            'posts': {platform: post_to_dict(post) for platform, post in result['posts'].items()},
            'used_fallback': result['used_fallback'],
        }), 201
    except LookupError as e:
        return jsonify({'success': False, 'error': str(e)}), 404
    finally:
        session.close()


@main.route('/posts')
def get_posts():
    """List posts, optionally filtered with ?platform=twitter|linkedin."""
    user_id = require_user_id()
    try:
        platform = _parse_enum(PostPlatform, request.args.get('platform'))
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    session = _session()
    try:
        return jsonify({'posts': [post_to_dict(p) for p in list_posts(session, user_id, platform)]})
    finally:
        session.close()


@main.route('/posts/upcoming')
def get_upcoming_posts():
    user_id = require_user_id()
    session = _session()
    try:
        return jsonify({'posts': [post_to_dict(p) for p in list_upcoming_posts(session, user_id)]})
    finally:
        session.close()


@main.route('/posts', methods=['POST'])
def create_or_update_post():
    """Save a post; an `id` in the body updates that post instead."""
    user_id = require_user_id()
    data = request.get_json(silent=True) or {}
    try:
        platform = _parse_enum(PostPlatform, data.get('platform'))
        status = _parse_enum(PostStatus, data.get('status'))
        scheduled_for = _parse_datetime(data.get('scheduled_for'))
        if platform is None and not data.get('id'):
            raise ValueError("platform is required")
        post_id = _parse_uuid(str(data['id'])) if data.get('id') else None
        article_id = _parse_uuid(str(data['article_id'])) if data.get('article_id') else None
        if (data.get('id') and post_id is None) or (data.get('article_id') and article_id is None):
            raise ValueError("Invalid id")
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    session = _session()
    try:
        post = save_post(
            session,
            user_id,
            platform,
            data.get('content', ''),
            article_id=article_id,
            scheduled_for=scheduled_for,
            status=status,
            post_id=post_id,
        )
        return jsonify({'success': True, 'post': post_to_dict(post)}), 200 if post_id else 201
    except LookupError as e:
        return jsonify({'success': False, 'error': str(e)}), 404
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    finally:
        session.close()


@main.route('/posts/<post_id>', methods=['PATCH'])
def edit_post(post_id: str):
    user_id = require_user_id()
    post_uuid = _parse_uuid(post_id)
    if post_uuid is None:
        return jsonify({'success': False, 'error': 'Post not found'}), 404

    data = request.get_json(silent=True) or {}
    changes = {}
    try:
        if 'content' in data:
            changes['content'] = data['content']
        if 'scheduled_for' in data:
            changes['scheduled_for'] = _parse_datetime(data['scheduled_for'])
        if 'status' in data:
            changes['status'] = _parse_enum(PostStatus, data['status'])
            if changes['status'] is None:
                raise ValueError("status cannot be empty")
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    session = _session()
    try:
        if not update_post(session, user_id, post_uuid, changes):
            return jsonify({'success': False, 'error': 'Post not found'}), 404
        return jsonify({'success': True})
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    finally:
        session.close()


@main.route('/posts/<post_id>', methods=['DELETE'])
def remove_post(post_id: str):
    user_id = require_user_id()
    post_uuid = _parse_uuid(post_id)
    if post_uuid is None:
        return jsonify({'success': False, 'error': 'Post not found'}), 404

    session = _session()
    try:
        if not delete_post(session, user_id, post_uuid):
            return jsonify({'success': False, 'error': 'Post not found'}), 404
        return jsonify({'success': True})
    finally:
        session.close()


# =============================================================================
# Scheduler Routes
# =============================================================================

def _month_args():
    """(year, month) from the query string; both or neither."""
    year = request.args.get('year', type=int)
    month = request.args.get('month', type=int)
    if (year is None) != (month is None):
        raise ValueError("year and month must be given together")
    if month is not None:
        month_bounds(year, month)
    return year, month


@main.route('/schedule')
def get_schedule():
    """Posts dated in ?year=&month= (defaults to the current UTC month)."""
    user_id = require_user_id()
    try:
        year, month = _month_args()
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    if year is None:
        now = datetime.now(timezone.utc)
        year, month = now.year, now.month

    session = _session()
    try:
        posts = get_scheduled_posts(session, user_id, year, month)
        return jsonify({'year': year, 'month': month, 'posts': [post_to_dict(p) for p in posts]})
    finally:
        session.close()


@main.route('/schedule/posts')
def get_schedule_posts():
    """All posts filtered by ?status=, ?platform= and ?year=&month=."""
    user_id = require_user_id()
    try:
        status = _parse_enum(PostStatus, request.args.get('status'))
        platform = _parse_enum(PostPlatform, request.args.get('platform'))
        year, month = _month_args()
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    session = _session()
    try:
        posts = get_all_posts(session, user_id, status=status, platform=platform, year=year, month=month)
        return jsonify({'posts': [post_to_dict(p) for p in posts]})
    finally:
        session.close()


@main.route('/schedule/stats')
def get_schedule_stats():
    """Posts per day of month for ?year=&month=."""
    user_id = require_user_id()
    try:
        year, month = _month_args()
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    if year is None:
        return jsonify({'success': False, 'error': 'year and month are required'}), 400

    session = _session()
    try:
        stats = get_calendar_stats(session, user_id, year, month)
        return jsonify({'year': year, 'month': month, 'days': {str(day): count for day, count in sorted(stats.items())}})
    finally:
        session.close()


def _change_schedule(post_id: str, action, needs_date: bool):
    user_id = require_user_id()
    post_uuid = _parse_uuid(post_id)
    if post_uuid is None:
        return jsonify({'success': False, 'error': 'Post not found'}), 404

    args = []
    if needs_date:
        try:
            scheduled_for = _parse_datetime((request.get_json(silent=True) or {}).get('scheduled_for'))
        except ValueError as e:
            return jsonify({'success': False, 'error': str(e)}), 400
        if scheduled_for is None:
            return jsonify({'success': False, 'error': 'scheduled_for is required'}), 400
        args.append(scheduled_for)

    session = _session()
    try:
        if not action(session, user_id, post_uuid, *args):
            return jsonify({'success': False, 'error': 'Post not found'}), 404
        return jsonify({'success': True})
    finally:
        session.close()


@main.route('/posts/<post_id>/schedule', methods=['POST'])
def schedule(post_id: str):
    return _change_schedule(post_id, schedule_post, needs_date=True)


@main.route('/posts/<post_id>/reschedule', methods=['POST'])
def reschedule(post_id: str):
    return _change_schedule(post_id, reschedule_post, needs_date=True)


@main.route('/posts/<post_id>/cancel', methods=['POST'])
def cancel_schedule(post_id: str):
    return _change_schedule(post_id, cancel_scheduled_post, needs_date=False)


@main.route('/posts/<post_id>/publish', methods=['POST'])
def publish(post_id: str):
    return _change_schedule(post_id, mark_post_published, needs_date=False)


# =============================================================================
# Tone Profile Routes
# =============================================================================

@main.route('/tone')
def get_tone():
    user_id = require_user_id()
    session = _session()
    try:
        profile = get_tone_profile(session, user_id)
        return jsonify({'tone': tone_profile_to_dict(profile) if profile else None})
    finally:
        session.close()


@main.route('/tone', methods=['PUT'])
def put_tone():
    user_id = require_user_id()
    data = request.get_json(silent=True) or {}
    keywords = data.get('keywords') or []
    if not isinstance(keywords, list):
        return jsonify({'success': False, 'error': 'keywords must be a list'}), 400

    session = _session()
    try:
        profile = save_tone_profile(
            session,
            user_id,
            data.get('name', ''),
            data.get('style', ''),
            description=data.get('description', ''),
            keywords=keywords,
        )
        return jsonify({'success': True, 'tone': tone_profile_to_dict(profile)})
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400
    finally:
        session.close()
