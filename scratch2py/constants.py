"""Constants used throughout the blocks-to-Python conversion."""

from typing import FrozenSet

# Placed by the transpiler after a loop body; consumed by the indentation pass.
DEDENT_SENTINEL = "%^&*()"

NOT_IMPLEMENTED_YET = "# This block is not implemented yet."

# Name of the runtime module every generated file talks to
RUNTIME = "martypy"

# Words which are invalid for any bare Python identifier
PYTHON_RESERVED_WORDS: FrozenSet[str] = frozenset({
    "False",
    "None",
    "True",
    "and",
    "as",
    "assert",
    "async",
    "await",
    "break",
    "class",
    "continue",
    "def",
    "del",
    "elif",
    "else",
    "except",
    "finally",
    "for",
    "from",
    "global",
    "if",
    "import",
    "in",
    "is",
    "lambda",
    "nonlocal",
    "not",
    "or",
    "pass",
    "raise",
    "return",
    "try",
    "while",
    "with",
    "yield",
})

# Module-level names imported by every generated file
GENERATED_MODULE_NAMES: FrozenSet[str] = frozenset({
    "datetime",
    "math",
    "random",
    "time",
    RUNTIME,
})

# Capitalised runtime classes; sprite names must stay clear of them
SPRITE_RESERVED_NAMES: FrozenSet[str] = frozenset({
    "Color",
    "Costume",
    "Sound",
    "Sprite",
    "Trigger",
    "Watcher",
})

# Properties and methods every runtime target exposes
RUNTIME_RESERVED_NAMES: FrozenSet[str] = frozenset({
    # Essential data
    "costumes",
    "effectChain",
    "effects",
    "height",
    "name",
    "sounds",
    "triggers",
    "vars",
    "watchers",
    "width",
    # Other objects
    "andClones",
    "clones",
    "stage",
    "sprites",
    "parent",
    # Motion
    "direction",
    "glide",
    "goto",
    "move",
    "rotationStyle",
    "x",
    "y",
    # Looks
    "costumeNumber",
    "costume",
    "moveAhead",
    "moveBehind",
    "say",
    "sayAndWait",
    "size",
    "think",
    "thinkAndWait",
    "visible",
    # Sounds
    "audioEffects",
    "getSound",
    "getSoundsPlayedByMe",
    "playSoundUntilDone",
    "startSound",
    "stopAllOfMySounds",
    "stopAllSounds",
    # Control & events
    "broadcast",
    "broadcastAndWait",
    "createClone",
    "deleteThisClone",
    "fireBackdropChanged",
    "wait",
    "warp",
    # Operators - casting
    "toNumber",
    "toBoolean",
    "toString",
    "compare",
    # Operators - strings
    "stringIncludes",
    "letterOf",
    # Operators - numbers
    "degToRad",
    "degToScratch",
    "radToDeg",
    "radToScratch",
    "random",
    "scratchToDeg",
    "scratchToRad",
    "normalizeDeg",
    # Sensing
    "answer",
    "askAndWait",
    "colorTouching",
    "keyPressed",
    "loudness",
    "mouse",
    "restartTimer",
    "timer",
    "touching",
    # Lists
    "arrayIncludes",
    "deleteOf",
    "indexInArray",
    "insertAt",
    "itemOf",
    "replaceAt",
    # Pen
    "clearPen",
    "penColor",
    "penDown",
    "penSize",
    "stamp",
})

# Largest integer a double represents exactly (Number.MAX_SAFE_INTEGER)
MAX_SAFE_INTEGER = 2 ** 53 - 1
