"""
Default boilerplate filter rules.

Rule lists are immutable tuples applied in order. The safe list runs before
the standard/bypass decision and never deletes content; the aggressive list
runs on the bypass path only.
"""

from ..models.config import FilterAction, FilterRule

# Attributes that carry meaning for extraction or conversion
ALLOWED_ATTRIBUTES: tuple[str, ...] = (
    "href",
    "src",
    "alt",
    "title",
    "class",
    "id",
    "role",
    "lang",
    "style",
    "hidden",
    "aria-hidden",
    "aria-label",
    "colspan",
    "rowspan",
    "headers",
    "scope",
    "start",
    "datetime",
    "cite",
    "rel",
    "name",
    "content",
    "itemscope",
    "itemtype",
    "itemprop",
    "data-language",
    "data-lang",
    "data-testid",
    "data-test-id",
    "data-adclicklocation",
    "promoted",
    "slot",
)

SAFE_RULES: tuple[FilterRule, ...] = (
    FilterRule(
        description="Strip tracking and presentational attributes",
        selector="*",
        action=FilterAction.STRIP_ATTRIBUTES,
        allowed_attributes=ALLOWED_ATTRIBUTES,
    ),
    FilterRule(
        description="Unwrap legacy presentational wrappers",
        selector="font, center, big, span:not([class]):not([id]):not([style])",
        action=FilterAction.UNWRAP,
    ),
    FilterRule(
        description="Unwrap layout-only grid wrappers",
        selector=(
            "div:is(.wrapper, .container, .row, .page-wrapper, .site-wrapper, .layout)"
            ':not([class*="side"], [class*="nav"], [class*="menu"], [class*="related"])'
        ),
        action=FilterAction.UNWRAP,
    ),
    FilterRule(
        description="Promote GitHub README content",
        selector="#readme .markdown-body",
        action=FilterAction.UNWRAP,
    ),
    FilterRule(
        description="Keep only Reddit main post content by unwrapping post wrappers",
        selector='[data-test-id="post-content"], shreddit-post, [data-testid="post-container"]',
        action=FilterAction.UNWRAP,
    ),
)

AGGRESSIVE_RULES: tuple[FilterRule, ...] = (
    # Navigation elements
    FilterRule(
        description="Remove navigation bars and menus",
        selector='nav, [role="navigation"], .navigation, .nav, .navbar, .menu, .main-menu',
        action=FilterAction.REMOVE,
    ),
    # Headers and footers (article headers hold titles, keep them)
    FilterRule(
        description="Remove page headers",
        selector=(
            'header:not(article header, main header), [role="banner"], '
            ".page-header, .site-header"
        ),
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove page footers",
        selector=(
            'footer:not(article footer), [role="contentinfo"], .footer, '
            ".page-footer, .site-footer"
        ),
        action=FilterAction.REMOVE,
    ),
    # Sidebars and secondary content
    FilterRule(
        description="Remove sidebars",
        selector='aside, [role="complementary"], .sidebar, .side-bar, .secondary',
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove advertisement containers",
        selector=(
            '.ad, .ads, .advertisement, .advert, [class^="ad-"], [id^="ad-"], '
            ".sponsored, .promo, .adsbygoogle"
        ),
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove social media widgets and share buttons",
        selector=".social, .share, .sharing, .social-share, .social-media, .follow-us, .twitter-tweet, .fb-post",
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove cookie consent banners",
        selector='.cookie, .consent, .privacy-notice, [id*="cookie"], [class*="cookie"], .gdpr',
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove comment sections",
        selector=".comments, .comment-section, #comments, .disqus, .livefyre",
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove related articles sections",
        selector=".related, .suggestions, .recommended, .more-articles, .you-might-like",
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove newsletter signup forms",
        selector=".newsletter, .signup, .subscribe, .email-signup, .cta, .call-to-action",
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove search forms",
        selector='.search, .search-form, .search-box, [role="search"]',
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove popup and modal content",
        selector=".popup, .modal, .overlay, .lightbox",
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove breadcrumb navigation",
        selector='.breadcrumb, .breadcrumbs, [aria-label="breadcrumb"]',
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove skip links and screen reader helpers",
        selector=".skip-link, .skip-nav, .screen-reader-text, .sr-only, .visually-hidden",
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove GitHub UI chrome",
        selector=(
            ".gh-header, .js-navigation-container, .repository-lang-stats, .pagehead, "
            ".UnderlineNav, .file-navigation, .Layout-sidebar, .BorderGrid, .header-search"
        ),
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove Reddit sidebars, promotions and comments",
        selector=(
            'shreddit-ad, [data-testid="post-sidebar"], faceplate-tracker, [slot="sidebar"], '
            "shreddit-comment-tree, shreddit-comment, [data-adclicklocation], [promoted], "
            '[data-testid="left-sidebar"]'
        ),
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove Wikipedia navigation and info boxes",
        selector=".navbox, .infobox, .metadata, .navigation-not-searchable, .mw-editsection",
        action=FilterAction.REMOVE,
    ),
    # Text orphaned when the safe pass unwrapped its container
    FilterRule(
        description="Remove orphaned inline labels left directly under body",
        selector="body > :is(span, small, label, button)",
        action=FilterAction.REMOVE,
    ),
)

# Conservative aggressive list for code and documentation pages
CODE_DOCS_RULES: tuple[FilterRule, ...] = (
    FilterRule(
        description="Remove obvious advertisements in code docs",
        selector=".ad, .ads, .advertisement, .adsbygoogle",
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove cookie banners in code docs",
        selector=".cookie, .consent, .privacy-notice, .gdpr",
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove social media widgets in code docs",
        selector=".social-share, .twitter-tweet, .fb-post",
        action=FilterAction.REMOVE,
    ),
    FilterRule(
        description="Remove site navigation in code docs",
        selector='nav, [role="navigation"]',
        action=FilterAction.REMOVE,
    ),
)
