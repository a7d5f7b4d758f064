import logging
from pathlib import Path
from typing import List, Tuple

log = logging.getLogger(__name__)

DEFAULT_SENTENCES: Tuple[str, ...] = (
    "The quick brown fox jumps over the lazy dog.",
    "Practice makes perfect typing skills develop.",
    "Typing speed and accuracy improve with consistent practice.",
    "Focus on proper finger placement and smooth keystrokes.",
    "Regular typing exercises help build muscle memory.",
    "Maintain good posture while typing at your desk.",
    "Take breaks to prevent strain and maintain performance.",
    "Challenge yourself with increasingly difficult passages.",
    "Speed comes naturally when accuracy is prioritized first.",
    "Professional typists achieve both speed and precision.",
    "Modern keyboards facilitate faster and more comfortable typing.",
    "Touch typing eliminates the need to look at keys.",
    "Rhythm and flow are essential for efficient typing.",
    "Consistent practice leads to remarkable improvement over time.",
    "Advanced typists can exceed one hundred words per minute.",
)

DEFAULT_WORDS: Tuple[str, ...] = tuple(
    """
    a about above across act add after again against age ago air all almost
    alone along already also always am among an and animal answer any appear
    are area arm around art as ask at away back ball base be bear beat beauty
    bed been before began begin behind being bell best better between big bird
    black blue boat body bone book both bottom box boy bread break bring brown
    build burn busy but buy by call came can car care carry case cat catch cause
    cell center chair change check child city class clean clear climb close cloud
    cold color come common cook copy corn could count country course cover cross
    crowd cry current cut dance dark day dead deal dear deep desk did differ
    direct do doctor does dog done door double down draw dream dress drink drive
    drop dry during each early earth east eat edge egg eight either else end
    enough enter even evening event ever every exact example eye face fact fair
    fall family far farm fast father fear feel few field fight figure fill final
    find fine finger finish fire first fish five floor flow flower fly follow
    food foot for force forest form found four free fresh friend from front
    fruit full fun game garden gas gather gave general gentle get girl give glad
    glass go gold gone good got govern grass great green ground group grow guess
    had hair half hand happen happy hard has hat have he head hear heart heat
    heavy help her here high hill him his hold hole home hope horse hot hour
    house how huge human hundred hunt idea if in inch include island it jump
    just keep key kind king know lake land large last late laugh lead learn
    leave left leg less letter level lie life light like line list listen
    little live long look lost lot loud love low machine made main make man
    many map mark market match matter may me mean measure meet melody metal
    middle might mile milk mind minute miss modern moment money month moon more
    morning most mother mountain mouth move much music must my name nation near
    need never new next night nine no noise north nose note nothing notice now
    number object ocean of off offer office often old on once one only open
    order other our out over own page paint paper part party pass past path
    pattern pay people perhaps person pick picture piece place plain plan plant
    play please point poor position power practice press pretty print problem
    pull push put quick quiet quite race rain raise reach read ready real reason
    record red remember rest rhythm rich ride right ring river road rock room
    root rule run safe said sail same sand save say school science sea season
    seat second see seed seem self sell send sense sentence serve set seven
    shape share sharp she ship shoe shop short should show side sight sign
    silent simple since sing sister sit six size skill skin sky sleep slow small
    smile snow so soft soil some song soon sound south space speak special speed
    spell spring square stand star start state stay steel step still stone stop
    store story straight strange stream street strong study such sugar summer
    sun supply sure surface swim system table tail take talk tall teach team
    tell ten test than thank that the their them then there these they thick
    thin thing think third this those though thought three through time tiny
    to today together told tone too took tool top touch toward town track trade
    train travel tree trip true try turn two type under unit until up us use
    usual valley value very village visit voice vowel wait walk wall want warm
    was wash watch water wave way we wear weather week weight well went were
    west what wheel when where which while white who whole why wide wild will
    win wind window winter wish with without woman wonder wood word work world
    would write wrong yard year yellow yes yet you young your
    """.split()
)

_TEXT_DIR = Path("assets/texts")
_SENTENCES_FILE = _TEXT_DIR / "sentences.txt"
_WORDS_FILE = _TEXT_DIR / "words.txt"


def _read_lines(path: Path) -> List[str]:
    text = path.read_text(encoding="utf-8").replace("\r\n", "\n")
    return [ln.strip() for ln in text.split("\n") if ln.strip()]


def load_sentences(path: Path = _SENTENCES_FILE) -> Tuple[str, ...]:
    """One sentence per line from assets/texts/sentences.txt, else the built-ins."""
    try:
        if path.exists():
            lines = _read_lines(path)
            if lines:
                return tuple(lines)
    except OSError as e:
        log.warning("Failed to read sentences from %s: %s", path, e)
    return DEFAULT_SENTENCES


def load_words(path: Path = _WORDS_FILE) -> Tuple[str, ...]:
    try:
        if path.exists():
            words = [w for ln in _read_lines(path) for w in ln.split()]
            if words:
                return tuple(words)
    except OSError as e:
        log.warning("Failed to read word list from %s: %s", path, e)
    return DEFAULT_WORDS
