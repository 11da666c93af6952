USER_AGENT = "Mozilla/5.0 InsuranceNewsIntelligenceBot"

GOOGLE_NEWS_SOURCE_NAME = "Google News"

FEED_SOURCES = {
    # Google News search: insurance losses
    "google-news-loss": {
        "url": (
            "https://news.google.com/rss/search?q=insurance+reinsurance+"
            "(major+loss+OR+large+loss+OR+catastrophe+OR+hurricane+OR+wildfire+OR+flood+OR+cyber)"
            "&hl=en-GB&gl=GB&ceid=GB:en"
        ),
        "prefix": "gnl",
        "source_name": GOOGLE_NEWS_SOURCE_NAME,
        "category": "Major Loss",
    },
    # Google News search: insurance M&A
    "google-news-ma": {
        "url": (
            "https://news.google.com/rss/search?q=insurance+reinsurance+"
            "(merger+OR+acquisition+OR+takeover+OR+buyout)"
            "&hl=en-GB&gl=GB&ceid=GB:en"
        ),
        "prefix": "gnm",
        "source_name": GOOGLE_NEWS_SOURCE_NAME,
        "category": "M&A",
    },
}

# Haggie Partners has no RSS; the listing page is scraped
PRESS_RELEASE_SOURCE = {
    "key": "haggie-press-releases",
    "url": "https://www.haggiepartners.com/press-releases/",
    "prefix": "hp",
    "source_name": "Haggie Partners",
    "host": "haggiepartners.com",
}
