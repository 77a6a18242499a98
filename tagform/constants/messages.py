# constants/messages.py

class MESSAGE:
    USER_REGISTERED = "User registered successfully"
    AUTH_SUCCESS = "Login successful"
    LOGOUT_SUCCESS = "Successfully logged out"
    PROFILE_FOUND = "Profile retrieved successfully"
    GOOGLE_URL = "Google sign in URL generated"

    WORKSPACE_CREATED = "Workspace created successfully"
    WORKSPACE_LIST = "Workspaces retrieved successfully"
    WORKSPACE_FOUND = "Workspace retrieved successfully"
    WORKSPACE_UPDATED = "Workspace updated successfully"
    WORKSPACE_DELETED = "Workspace deleted successfully"

    FORM_CREATED = "Form created successfully"
    FORM_LIST = "Forms retrieved successfully"
    FORM_FOUND = "Form retrieved successfully"
    FORM_UPDATED = "Form updated successfully"
    FORM_DELETED = "Form deleted successfully"
    SETTINGS_FOUND = "Form settings retrieved successfully"
    SETTINGS_UPDATED = "Form settings updated successfully"

    QUESTION_CREATED = "Question created successfully"
    QUESTION_UPDATED = "Question updated successfully"
    QUESTION_DELETED = "Question deleted successfully"
    QUESTIONS_REORDERED = "Questions reordered successfully"
    QUESTION_MOVED = "Question moved successfully"
    QUESTION_HIERARCHY = "Question hierarchy retrieved successfully"

    CHOICE_LIST = "Choices retrieved successfully"
    CHOICE_CREATED = "Choice created successfully"
    CHOICE_UPDATED = "Choice updated successfully"
    CHOICE_DELETED = "Choice deleted successfully"
    CHOICES_REORDERED = "Choices reordered successfully"

    SUBMISSION_STARTED = "Submission started"
    SUBMISSION_RESUMED = "Submission already in progress"
    SUBMISSION_COMPLETED = "Submission completed"
    SUBMISSION_LIST = "Submissions retrieved successfully"
    SUBMISSION_FOUND = "Submission retrieved successfully"

    ANALYTICS_FOUND = "Analytics retrieved successfully"
