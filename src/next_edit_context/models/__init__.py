# next_edit_context/models/__init__.py
"""
Data models for next-edit prompt assembly.

All public names are re-exported here
(``from next_edit_context.models import TokenBudget``).
"""

# --- budgets & clip results ---------------------------------------------------
from next_edit_context.models.budget import (  # noqa: F401
    ClipResult,
    ConsumeResult,
    TokenBudget,
)

# --- documents, ranges & edits ------------------------------------------------
from next_edit_context.models.document import (  # noqa: F401
    CurrentDocument,
    DocumentId,
    DocumentSnapshot,
    LineRange,
    LineReplacement,
    OffsetRange,
    RootedEdit,
    StringEdit,
    StringReplacement,
    split_lines,
)

# --- enums & constants --------------------------------------------------------
from next_edit_context.models.enums import (  # noqa: F401
    FIXED_WINDOW_LINES_ABOVE,
    FIXED_WINDOW_LINES_BELOW,
    AggressivenessLevel,
    BudgetError,
    ContextKind,
    EditIntent,
    EditIntentParseError,
    IncludeLineNumbersOption,
    PromptingStrategy,
    ResponseFormat,
    TraitPosition,
    UserActionKind,
)

# --- history ------------------------------------------------------------------
from next_edit_context.models.history import (  # noqa: F401
    EditHistoryEntry,
    HistoryEntry,
    ViewHistoryEntry,
    dump_history,
    load_history,
)

# --- language context ---------------------------------------------------------
from next_edit_context.models.language_context import (  # noqa: F401
    LanguageContextItem,
    LanguageContextResponse,
)

# --- options ------------------------------------------------------------------
from next_edit_context.models.options import (  # noqa: F401
    DEFAULT_OPTIONS,
    DEFAULT_USER_HAPPINESS_SCORE_CONFIGURATION,
    CurrentFileOptions,
    DebounceConfig,
    DiffHistoryOptions,
    LanguageContextOptions,
    PagedClippingOptions,
    PromptOptions,
    RecentlyViewedDocumentsOptions,
    UserHappinessScoreConfiguration,
    parse_tool_arguments,
)
