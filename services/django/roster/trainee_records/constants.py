# Only the first rows of a sheet are considered when looking for the header.
HEADER_SCAN_ROWS = 25

# Identities shorter than this after sanitizing are formatting noise
# (row numbers, stray digits) rather than trainee numbers.
MIN_IDENTITY_LENGTH = 3
MIN_COURSE_CODE_LENGTH = 2

# Column widths of the record models. Keys longer than MAX_KEY_LENGTH are
# skipped, text fields are clipped.
MAX_KEY_LENGTH = 64
MAX_NAME_LENGTH = 255
MAX_PHONE_LENGTH = 32

DEFAULT_SUBJECT_LEVEL = 1
DEFAULT_CREDIT_HOURS = 3

# Used when the roster has no trainee-name column.
TRAINEE_NAME_PREFIX = "متدرب "

# Ceiling on operations per committed write batch.
IMPORT_BATCH_SIZE = 400

# Legacy Arabic spreadsheets exported as CSV are usually Windows-1256.
FALLBACK_TEXT_ENCODING = "cp1256"

# Match and lookup order for trainee natural keys.
NATURAL_KEY_FIELDS = ("trainee_number", "national_id")

SUBJECTS = "subjects"
TRAINEES = "trainees"
COLLECTIONS = (SUBJECTS, TRAINEES)
