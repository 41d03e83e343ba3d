from pathlib import Path

# Repo-root conventional directories/files (overrideable via workbench.yaml)
CONFIG_DIR = Path("configs")
PROVIDERS_DIR = CONFIG_DIR / "providers"
WORKBENCH_FILE = CONFIG_DIR / "workbench.yaml"
TAXONOMY_FILE = CONFIG_DIR / "taxonomy.yaml"

PROMPTS_DIR = Path("prompts")
SHARED_PROMPTS_DIRNAME = "shared"
STORAGE_FILE = Path("data") / "library.json"
