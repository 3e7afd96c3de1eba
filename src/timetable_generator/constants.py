"""Constants for timetable generation."""

# Input file names inside a data directory
SUBJECT_FILE = "subject.csv"
TEACHER_FILE = "teacher.csv"
ROOM_FILE = "room.csv"
GROUP_FILE = "student_group.csv"
TIMESLOT_FILE = "timeslot.csv"
QUALIFICATION_FILE = "teach.csv"
REGISTRATION_FILE = "register.csv"

INPUT_FILES = [
    SUBJECT_FILE,
    TEACHER_FILE,
    ROOM_FILE,
    GROUP_FILE,
    TIMESLOT_FILE,
    QUALIFICATION_FILE,
    REGISTRATION_FILE,
]

# Default output file name
OUTPUT_FILE = "output.csv"

# Expected columns per input table (after header normalization)
SUBJECT_COLUMNS = ["subject_id", "subject_name", "theory", "practice", "credit"]
TEACHER_COLUMNS = ["teacher_id", "teacher_name", "role"]
ROOM_COLUMNS = ["room_id", "room_name", "room_type"]
GROUP_COLUMNS = ["group_id", "group_name", "student_count", "advisor"]
TIMESLOT_COLUMNS = ["timeslot_id", "day", "period", "start", "end"]
QUALIFICATION_COLUMNS = ["teacher_id", "subject_id"]
REGISTRATION_COLUMNS = ["group_id", "subject_id"]

# Output table columns, in order
OUTPUT_COLUMNS = [
    "group_id",
    "timeslot_id",
    "day",
    "period",
    "subject_id",
    "teacher_id",
    "room_id",
]

# Weekly grid
DAYS = ["Mon", "Tue", "Wed", "Thu", "Fri"]
FIRST_PERIOD = 1
LAST_PERIOD = 10
PERIODS = list(range(FIRST_PERIOD, LAST_PERIOD + 1))

# Advisor names in the group table are separated by this character
ADVISOR_SEPARATOR = "/"

# Subject id used for homeroom sessions
HOMEROOM_SUBJECT_ID = "HOMEROOM"
