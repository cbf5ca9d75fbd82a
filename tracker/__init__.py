"""Writing tracker core library — state, persistence and derived views.

Public API re-exports for convenient imports:
    from tracker import open_state_store, activity_level, ...
"""

# Workspace & paths
from tracker.workspace import (
    workspace_root,
    config_path,
    load_config,
    get_user_timezone,
    today_str,
    now_ms,
    store_path,
)

# File I/O
from tracker.fileio import (
    read_text,
    read_json,
    read_yaml,
    write_json_atomic,
)

# Errors
from tracker.errors import (
    TrackerError,
    LoadError,
    SaveError,
    TrackerValidationError,
)

# Models
from tracker.models import (
    UNIT_CHARACTERS,
    UNIT_CUTS,
    VALID_UNIT_TYPES,
    MEMO_MAX_LENGTH,
    MAX_CATEGORIES,
    PRESET_COLORS,
    WritingEntry,
    DayData,
    ThresholdSettings,
    AppSettings,
    Category,
    TodoItem,
    AppStore,
)

# Persistence
from tracker.persistence import (
    KeyValueStore,
    JsonFileStore,
    PersistenceAdapter,
    FlushQueue,
)

# State
from tracker.state import StateStore, open_state_store

# Derived views
from tracker.views import (
    activity_level,
    day_total,
    HeatmapCell,
    heatmap_weeks,
    month_labels,
    sorted_todos,
    todos_completed_on,
    completed_by_date,
    category_for,
)

# Validation
from tracker.validation import (
    validate_amount,
    parse_amount,
    validate_thresholds,
    validate_todo_input,
    validate_category_input,
    validate_unit_type,
    ensure_valid,
)
