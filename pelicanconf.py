# --- Site Information ---
SITENAME = 'mediaembed demo'
SITEURL = ''

# --- Paths ---
PATH = 'content'
ARTICLE_PATHS = ['articles']
PAGE_PATHS = ['pages']
TIMEZONE = 'UTC'
DEFAULT_LANG = 'en'

# --- Plugins ---
PLUGIN_PATHS = ['pelican-plugins']
PLUGINS = ['media_embed']
# Optional plugin settings
MEDIAEMBED_ENABLED = True
MEDIAEMBED_MASTODON_HOSTS = '\n'.join([
    'mastodon.social',
])
# Host collaborators for oEmbed titles; placeholders carry no title without them
MEDIAEMBED_OEMBED_STORE = None
MEDIAEMBED_OEMBED_SERVICE = None

# --- URL Settings ---
RELATIVE_URLS = True
