# constants/utils.py

class WORKSPACE_TYPE:
    PRIVATE = "private"
    PUBLIC = "public"

    ALL = (PRIVATE, PUBLIC)


class SUBMISSION_STATUS:
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    ALL = (IN_PROGRESS, COMPLETED)


class QUESTION_TYPE:
    MULTIPLE_CHOICE = "multiple-choice"
    DROPDOWN = "dropdown"
    YES_NO = "yes-no"
    CHECKBOX = "checkbox"
    SHORT_TEXT = "short-text"
    LONG_TEXT = "long-text"
    EMAIL = "email"
    PHONE = "phone"
    ADDRESS = "address"
    WEBSITE = "website"
    DATE = "date"

    ALL = (
        MULTIPLE_CHOICE, DROPDOWN, YES_NO, CHECKBOX, SHORT_TEXT, LONG_TEXT,
        EMAIL, PHONE, ADDRESS, WEBSITE, DATE,
    )
    # Questions that own a list of QuestionChoice rows
    CHOICE = (MULTIPLE_CHOICE, DROPDOWN, YES_NO, CHECKBOX)
    SINGLE_CHOICE = (MULTIPLE_CHOICE, DROPDOWN)
    TEXT = (SHORT_TEXT, LONG_TEXT, EMAIL, PHONE, ADDRESS, WEBSITE)


# Copy used for the settings row created together with every form
DEFAULT_FORM_SETTINGS = {
    "landing_page_button_text": "Start",
    "show_progress_bar": True,
    "ending_page_title": "Thank You!",
    "ending_page_description": "Your response has been recorded.",
    "ending_page_button_text": "Submit Another Response",
}

SUBMISSION_SORT_FIELDS = ("created_at", "started_at", "completed_at", "email", "status", "completion_time")

PATH_SEPARATOR = "."
