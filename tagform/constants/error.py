# constants/errors.py
class ERROR:
    INVALID_CREDENTIALS = "Invalid credentials"
    EMAIL_ALREADY_EXISTS = "Email already exists"
    INTERNAL_ERROR = "Something went wrong. Please try again later"
    UNAUTHORIZED = "Authentication failed. Token is missing or invalid."
    NO_TOKEN = "No token provided"

    # Field level validation messages (looked up as REQUIRED_<FIELD>)
    REQUIRED_NAME = "Name is required."
    REQUIRED_EMAIL = "Email is required."
    REQUIRED_PASSWORD = "Password is required."
    REQUIRED_FULLNAME = "Full name is required."
    REQUIRED_TEXT = "Text is required."
    REQUIRED_TYPE = "Type is required."
    REQUIRED_QUESTIONIDS = "Question IDs array is required"
    REQUIRED_CHOICEIDS = "Choice IDs array is required"
    REQUIRED_RESPONSES = "Responses must be an array"
    INVALID_EMAIL = "Invalid email format"
    WEAK_PASSWORD = "Password must be at least 8 characters long"

    WORKSPACE_NOT_FOUND = "Workspace not found"
    INVALID_WORKSPACE_TYPE = "Type must be either private or public"
    WORKSPACE_OWNER_ONLY = "Only the workspace owner can modify it"

    FORM_NOT_FOUND = "Form not found"
    FORM_SETTINGS_NOT_FOUND = "Form settings not found"
    INVALID_FORM_PATH = "Invalid form path"
    AMBIGUOUS_WORKSPACE = "More than one workspace matches this address"
    AMBIGUOUS_FORM = "More than one form matches this address"
    SLUG_CONFLICT = "Could not allocate a unique slug, please retry"

    QUESTION_NOT_FOUND = "Question not found"
    INVALID_QUESTION_TYPE = "Invalid question type"
    PARENT_NOT_IN_FORM = "Invalid question IDs or questions not in same form"
    QUESTION_CYCLE = "A question cannot be moved under itself or one of its descendants"
    MAX_CHARS_NOT_ALLOWED = "max_chars is only allowed on text questions"
    CHOICES_NOT_ALLOWED = "Choices are only allowed on choice questions"
    CHOICES_IN_USE = "Choices referenced by existing responses cannot be removed"

    CHOICE_NOT_FOUND = "Choice not found"
    CHOICE_TEXT_REQUIRED = "Choice text is required"
    CHOICE_NOT_IN_QUESTION = "Choice does not belong to this question"

    SUBMISSION_NOT_FOUND = "Submission not found"
    DUPLICATE_SUBMISSION = "You have already submitted this form"
    SUBMISSION_ALREADY_COMPLETED = "Submission is already completed"
    UNKNOWN_QUESTION = "Response references a question that is not part of this form"
    DUPLICATE_RESPONSE = "Only one response per question is allowed"
    MISSING_REQUIRED = "Required question was not answered"
    INVALID_RESPONSE = "Response does not match the question type"
    RESPONSE_TOO_LONG = "Response exceeds the maximum length"
    INVALID_SORT = "Invalid sort field"
    INVALID_STATUS = "Status must be either in_progress or completed"

    INVALID_EXPORT_FORMAT = "Format must be either csv or json"
