"""CSS selectors for the LinkedIn job search results page and the Easy Apply modal.

Where LinkedIn has shipped more than one markup variant the selector is a CSS
selector list, so the first variant present on the page matches.
"""


class LinkedInJobSelectors:
    """Selectors used by the query runner and the Easy Apply wizard."""

    # Search results
    CONTAINER = ".jobs-search-results-list, .scaffold-layout__list"
    JOB_CARDS = "div.job-card-container"
    PAGINATION_NEXT = "li[data-test-pagination-page-btn].selected + li"

    # Details pane, queried below DETAILS
    DETAILS = ".jobs-details__main-content"
    DETAILS_TITLE = ".jobs-unified-top-card__job-title, .job-details-jobs-unified-top-card__job-title"
    DETAILS_COMPANY = ".jobs-unified-top-card__company-name, .job-details-jobs-unified-top-card__company-name"
    DETAILS_DESCRIPTION = ".jobs-description"

    # Easy Apply modal
    APPLY_BUTTON = ".jobs-apply-button"
    PRIMARY_BUTTON = ".artdeco-button.artdeco-button--primary"
    RESUME_ITEM = ".jobs-resume-picker__resume"
    RESUME_ITEM_BUTTON = ".jobs-resume-picker__resume button"
    PROGRESS_BAR = ".artdeco-completeness-meter-linear__progress-element"
    MODAL_DISMISS = ".artdeco-modal__dismiss"
    CONFIRM_DISCARD = ".artdeco-modal__confirm-dialog-btn.artdeco-button--secondary"

    PROGRESS_ATTRIBUTE = "aria-valuenow"

    @classmethod
    def detail_fields(cls) -> dict:
        return {
            "title": cls.DETAILS_TITLE,
            "company": cls.DETAILS_COMPANY,
            "description": cls.DETAILS_DESCRIPTION,
        }
