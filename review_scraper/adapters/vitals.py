from review_scraper.adapters.base import ReviewWidgetAdapter


class VitalsAdapter(ReviewWidgetAdapter):
    """Vitals "Product Reviews" widget (class prefix vtl-pr) on Shopify stores."""

    name = "vitals"

    CARD = ".vtl-pr-review-card"
    AUTHOR = ".vtl-pr-review-card__review-author span"
    BODY = ".vtl-pr-review-card__review-text"
    IMAGE = ".vtl-pr-review-card__main-photo-holder img"
    LOAD_MORE = "button.vtl-pr__btn.vtl-pr__btn--stroked.vtl-pr-main-widget__show-more-button"

    # Only buttons inside a consent banner; a bare has-text('Accept') would
    # also hit store buttons such as "Accept offer".
    CONSENT_BUTTONS = [
        "#shopify-pc__banner button:has-text('Accept')",
        "[id*='cookie' i] button:has-text('Accept')",
        "[class*='cookie' i] button:has-text('Accept')",
        "[id*='consent' i] button:has-text('Accept')",
        "[class*='consent' i] button:has-text('Accept')",
    ]
