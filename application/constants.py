"""Application-level constants."""

from pathlib import Path

# Keys for serialization
TREE_KEY = "keyword_hierarchy"
SELECTED_KEY = "selected"
TRANSLATIONS_KEY = "translations"
CORE_USER_INTENT_KEY = "core_user_intent"
MODEL_USED_KEY = "model_used"
SEED_KEYWORDS_KEY = "seed_keywords"

# Output filenames
TREE_FILENAME = "tree.json"
SUBPROJECT_FILENAME = "subproject.json"
CONTEXT_FILENAME = "subproject_context.txt"
CONFIG_SNAPSHOT_FILENAME = "config.resolved.json"

# Output directory structure
OUTPUT_ROOT = Path("outputs")
LOG_FILENAME = "run.log"

# Placeholder rendered into prompts for empty optional inputs
NONE_PLACEHOLDER = "None"
