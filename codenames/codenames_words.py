"""Default word list used to deal fresh boards."""

from __future__ import annotations

DEFAULT_WORDS: tuple[str, ...] = (
    "ALIEN", "AMAZON", "AMBULANCE", "ANCHOR", "ANGEL", "APPLE", "ARM", "BACK",
    "BALL", "BANK", "BAR", "BATTERY", "BEACH", "BEAR", "BELT", "BERLIN",
    "BERRY", "BIRD", "BLOCK", "BOARD", "BOLT", "BOOT", "BOTTLE", "BOW",
    "BOX", "BRIDGE", "BRUSH", "BUCK", "BUTTON", "CABLE", "CAMERA", "CAMP",
    "CANADA", "CAP", "CAPITAL", "CAR", "CARD", "CASTLE", "CELL", "CENTAUR",
    "CENTER", "CHAIR", "CHANGE", "CHARGE", "CHECK", "CHOCOLATE", "CHURCH", "CIRCLE",
    "CLOCK", "CLOUD", "COAT", "CODE", "COIN", "COLD", "CONCERT", "COOK",
    "COPPER", "COVER", "CRANE", "CROSS", "CROWN", "DANCE", "DATE", "DECK",
    "DIAMOND", "DINOSAUR", "DOCTOR", "DOG", "DRAFT", "DRAGON", "DREAM", "DRESS",
    "DROP", "DUCK", "EAGLE", "EGYPT", "ENGINE", "ENGLAND", "EYE", "FALL",
    "FAN", "FIELD", "FIGURE", "FILE", "FILM", "FIRE", "FISH", "FLAG",
    "FLOOR", "FOREST", "FORK", "GHOST", "GIANT", "GLASS", "GLOVE", "GOLD",
    "GRACE", "GRASS", "GREEN", "HAMMER", "HEART", "HOLLYWOOD", "HOOK", "HORN",
    "HORSE", "HOSPITAL", "ICE", "ICE CREAM", "JET", "JUPITER", "KANGAROO", "KEY",
    "KING", "KNIFE", "LAB", "LASER", "LEAD", "LEMON", "LIGHT", "LINE",
    "LINK", "LOCK", "LOG", "LONDON", "MAMMOTH", "MAP", "MATCH", "MERCURY",
    "MEXICO", "MICROSCOPE", "MINE", "MINT", "MOON", "MOSCOW", "MOUSE", "NEEDLE",
    "NET", "NIGHT", "NINJA", "NOTE", "OCTOPUS", "OIL", "OLYMPUS", "OPERA",
    "ORANGE", "PAPER", "PARK", "PEN", "PIANO", "PILOT", "PIPE", "PIRATE",
    "PLANE", "PLATE", "POOL", "PORT", "POST", "PYRAMID", "QUEEN", "RABBIT",
    "RING", "RIVER", "ROBOT", "ROCK", "ROOT", "ROSE", "ROW", "RULER",
    "SALT", "SATURN", "SCALE", "SCHOOL", "SCIENTIST", "SCREEN", "SCUBA DIVER", "SEAL",
    "SERVER", "SHADOW", "SHIP", "SHOE", "SHOP", "SHOT", "SIGNAL", "SILVER",
    "SMOKE", "SNOW", "SONG", "SPACE", "SPIDER", "SPRING", "SPY", "STAR",
    "STONE", "STREAM", "STRING", "SUB", "SUIT", "SUN", "TABLE", "TANK",
    "TEACHER", "TEMPLE", "THIEF", "THREAD", "TIME", "TOKYO", "TOOL", "TOWER",
    "TRACK", "TRAIN", "TREE", "TRIP", "TUBE", "TURKEY", "UNICORN", "VAMPIRE",
    "VASE", "WATCH", "WATER", "WAVE", "WEB", "WHEEL", "WINDOW", "WING",
    "WIRE", "WITCH", "WOLF", "YARD",
)
