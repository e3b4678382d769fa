STORAGE_VERSION = 1
# Context menu quick slots shown under the root menu item
MAX_QUICK_SLOTS = 10
# Cap for every floating menu section except "field"
MAX_SECTION_ENTRIES = 5
# Quick slot titles longer than this are cut and suffixed with an ellipsis
MAX_TITLE_LENGTH = 32
EMPTY_VALUE_TITLE = "(empty value)"

CONTEXT_TYPES = ("fieldOnly", "url", "domain", "all", "urlPattern")
SPECIFICITY_RANK = {"fieldOnly": 0, "url": 1, "domain": 2, "all": 3, "urlPattern": 4}
UNKNOWN_RANK = 99

SHORTCUT_MODIFIERS = ("Ctrl", "Shift", "Alt", "Meta")
DEFAULT_SETTINGS = {
    "showFieldIcon": True,
    "showIconOnPageValues": False,
    "shortcutOpenMenu": "Ctrl+Alt+L",
    "shortcutOpenPanel": "Ctrl+Alt+K",
}

ENTRIES_VERSION_KEY = "entries_version"
