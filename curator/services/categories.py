"""
Curated feed categories.

Subscribing to a category adds its three feeds for the user, tagged with
the category id; unsubscribing removes exactly those feeds.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from curator.models import Feed
from curator.services.feeds import add_feed
from curator.services.rss_fetcher import feed_title

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryFeed:
    name: str
    url: str


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    description: str
    feeds: tuple[CategoryFeed, ...]

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'feeds': [{'name': f.name, 'url': f.url} for f in self.feeds],
        }


CATEGORIES: tuple[Category, ...] = (
    Category("technology", "Technology", "Latest tech news, gadgets, and innovations", (
        CategoryFeed("TechCrunch", "https://techcrunch.com/feed/"),
        CategoryFeed("The Verge", "https://www.theverge.com/rss/index.xml"),
        CategoryFeed("Wired", "https://www.wired.com/feed/rss"),
    )),
    Category("fashion", "Fashion & Style", "Trends, runway shows, and style tips", (
        CategoryFeed("Vogue", "https://www.vogue.com/feed/rss"),
        CategoryFeed("Fashionista", "https://fashionista.com/feed"),
        CategoryFeed("Refinery29", "https://www.refinery29.com/rss.xml"),
    )),
    Category("crypto", "Cryptocurrency", "Crypto news, blockchain, and Web3", (
        CategoryFeed("CoinDesk", "https://www.coindesk.com/arc/outboundfeeds/rss/"),
        CategoryFeed("Decrypt", "https://decrypt.co/feed"),
        CategoryFeed("The Block", "https://www.theblock.co/rss.xml"),
    )),
    Category("business", "Business & Finance", "Markets, startups, and economy", (
        CategoryFeed("Forbes", "https://www.forbes.com/real-time/feed2/"),
        CategoryFeed("Business Insider", "https://www.businessinsider.com/rss"),
        CategoryFeed("Entrepreneur", "https://www.entrepreneur.com/latest.rss"),
    )),
    Category("sports", "Sports", "Game updates, analysis, and highlights", (
        CategoryFeed("ESPN", "https://www.espn.com/espn/rss/news"),
        CategoryFeed("Bleacher Report", "https://bleacherreport.com/articles/feed"),
        CategoryFeed("The Athletic", "https://theathletic.com/feeds/rss/"),
    )),
    Category("health", "Health & Wellness", "Fitness, nutrition, and mental health", (
        CategoryFeed("Healthline", "https://www.healthline.com/rss"),
        CategoryFeed("Well+Good", "https://www.wellandgood.com/feed/"),
        CategoryFeed("MindBodyGreen", "https://www.mindbodygreen.com/rss.xml"),
    )),
    Category("food", "Food & Cooking", "Recipes, restaurants, and culinary trends", (
        CategoryFeed("Bon Appétit", "https://www.bonappetit.com/feed/rss"),
        CategoryFeed("Food52", "https://food52.com/blog.rss"),
        CategoryFeed("Serious Eats", "https://www.seriouseats.com/feed"),
    )),
    Category("travel", "Travel", "Destinations, tips, and adventures", (
        CategoryFeed("Lonely Planet", "https://www.lonelyplanet.com/blog/feed/"),
        CategoryFeed("Travel + Leisure", "https://www.travelandleisure.com/syndication/feed"),
        CategoryFeed("Condé Nast Traveler", "https://www.cntraveler.com/feed/rss"),
    )),
    Category("entertainment", "Entertainment", "Movies, TV, music, and celebrities", (
        CategoryFeed("Variety", "https://variety.com/feed/"),
        CategoryFeed("The Hollywood Reporter", "https://www.hollywoodreporter.com/feed/"),
        CategoryFeed("Billboard", "https://www.billboard.com/feed/"),
    )),
    Category("science", "Science", "Research, discoveries, and space", (
        CategoryFeed("Science Daily", "https://www.sciencedaily.com/rss/all.xml"),
        CategoryFeed("Space.com", "https://www.space.com/feeds/all"),
        CategoryFeed("Phys.org", "https://phys.org/rss-feed/"),
    )),
    Category("politics", "Politics", "Political news and analysis", (
        CategoryFeed("Politico", "https://www.politico.com/rss/politics08.xml"),
        CategoryFeed("The Hill", "https://thehill.com/feed/"),
        CategoryFeed("CNN Politics", "http://rss.cnn.com/rss/cnn_allpolitics.rss"),
    )),
    Category("gaming", "Gaming", "Video games, esports, and reviews", (
        CategoryFeed("IGN", "https://feeds.ign.com/ign/all"),
        CategoryFeed("Polygon", "https://www.polygon.com/rss/index.xml"),
        CategoryFeed("Kotaku", "https://kotaku.com/rss"),
    )),
    Category("lifestyle", "Lifestyle", "Home, design, and everyday living", (
        CategoryFeed("Apartment Therapy", "https://www.apartmenttherapy.com/main.rss"),
        CategoryFeed("Design Milk", "https://design-milk.com/feed/"),
        CategoryFeed("Dwell", "https://www.dwell.com/rss"),
    )),
    Category("marketing", "Marketing & Ads", "Digital marketing and advertising trends", (
        CategoryFeed("Marketing Land", "https://marketingland.com/feed"),
        CategoryFeed("Adweek", "https://www.adweek.com/feed/"),
        CategoryFeed("Social Media Today", "https://www.socialmediatoday.com/rss.xml"),
    )),
    Category("design", "Design", "Graphic design, UX, and creativity", (
        CategoryFeed("Design Shack", "https://designshack.net/feed/"),
        CategoryFeed("Smashing Magazine", "https://www.smashingmagazine.com/feed/"),
        CategoryFeed("Creative Bloq", "https://www.creativebloq.com/feed"),
    )),
    Category("automotive", "Automotive", "Cars, electric vehicles, and auto news", (
        CategoryFeed("Car and Driver", "https://www.caranddriver.com/rss/all.xml/"),
        CategoryFeed("Motor Trend", "https://www.motortrend.com/feed/"),
        CategoryFeed("Electrek", "https://electrek.co/feed/"),
    )),
)


def get_category(category_id: str) -> Optional[Category]:
    for category in CATEGORIES:
        if category.id == category_id:
            return category
    return None


def get_user_categories(session, user_id: str) -> list[str]:
    """Category ids the user currently has feeds for."""
    rows = session.query(Feed.category).filter(
        Feed.user_id == user_id,
        Feed.category.isnot(None)
    ).distinct().all()
    return sorted(row[0] for row in rows)


def subscribe_to_category(
    session,
    user_id: str,
    category_id: str,
    fetch_title: Callable[[str], str] = feed_title,
) -> dict:
    """
    Add all feeds of a curated category for the user.

    Feeds that fail validation are logged and skipped.

    Raises:
        LookupError: unknown category id
    """
    category = get_category(category_id)
    if not category:
        raise LookupError("Category not found")

    existing = session.query(Feed).filter(
        Feed.user_id == user_id,
        Feed.category == category_id
    ).first()
    if existing:
        return {'success': False, 'error': 'Already subscribed to this category'}

    feeds_added = 0
    for category_feed in category.feeds:
        result = add_feed(
            session,
            user_id,
            category_feed.url,
            category=category_id,
            name=category_feed.name,
            fetch_title=fetch_title,
        )
        if result['success']:
            feeds_added += 1
        else:
            logger.error(f"Failed to add feed {category_feed.name}: {result['error']}")

    return {
        'success': True,
        'category': category.name,
        'feeds_added': feeds_added,
    }


def unsubscribe_from_category(session, user_id: str, category_id: str) -> dict:
    """Remove all of the user's feeds tagged with this category."""
    removed = session.query(Feed).filter(
        Feed.user_id == user_id,
        Feed.category == category_id
    ).delete(synchronize_session=False)
    session.commit()
    logger.info(f"User {user_id} unsubscribed from {category_id} ({removed} feeds)")
    return {'success': True, 'feeds_removed': removed}
