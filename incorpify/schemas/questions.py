"""
Question catalog for the incorporation chat.

Defines the static questions the chat can ask:
- the seed set (the entry question, company_status)
- the incorporation_country branch follow-up
- the three terminal flows: new company, existing UAE company,
  existing company incorporated elsewhere

Questions are immutable and loaded once. The engine receives a
QuestionCatalog at construction and only ever reads from it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Sequence, Union

from ..exceptions import CatalogIntegrityError, UnknownQuestionError

ALL_OPTION_ID = "all"

COMPANY_STATUS_ID = "company_status"
INCORPORATION_COUNTRY_ID = "incorporation_country"
BRANCH_QUESTION_IDS = (COMPANY_STATUS_ID, INCORPORATION_COUNTRY_ID)


@dataclass(frozen=True)
class Option:
    """A selectable answer option."""
    id: str
    text: str


@dataclass(frozen=True)
class Question:
    """A single chat question."""
    id: str
    text: str
    options: tuple[Option, ...]
    subtext: Optional[str] = None
    multi_select: bool = False

    def get_option(self, option_id: str) -> Optional[Option]:
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    def has_option(self, option_id: str) -> bool:
        return self.get_option(option_id) is not None

    @property
    def option_ids(self) -> list[str]:
        return [o.id for o in self.options]

    @property
    def has_all_option(self) -> bool:
        return self.has_option(ALL_OPTION_ID)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "text": self.text,
            "options": [{"id": o.id, "text": o.text} for o in self.options],
            "multi_select": self.multi_select,
        }
        if self.subtext:
            data["subtext"] = self.subtext
        return data


@dataclass(frozen=True)
class Completion:
    """Closing message and recommended services for a finished flow."""
    key: str
    message: str
    services: tuple[str, ...]


def _q(qid: str, text: str, options: Sequence[tuple[str, str]],
       subtext: Optional[str] = None, multi_select: bool = False) -> Question:
    return Question(
        id=qid,
        text=text,
        subtext=subtext,
        options=tuple(Option(id=oid, text=otext) for oid, otext in options),
        multi_select=multi_select,
    )


# =============================================================================
# GREETING
# =============================================================================

GREETING_TEXT = "Hi there, What would you like to know?"
GREETING_SUBTEXT = "Let us handle the complexities, so you can focus on your business."


# =============================================================================
# SEED + BRANCH QUESTIONS
# =============================================================================

COMPANY_STATUS_QUESTION = _q(
    COMPANY_STATUS_ID,
    "Do you have an existing company in the UAE?",
    [
        ("new", "No, I want to set up a new company"),
        ("existing", "Yes, I have an existing company"),
    ],
)

SEED_QUESTIONS: tuple[Question, ...] = (COMPANY_STATUS_QUESTION,)

INCORPORATION_COUNTRY_QUESTION = _q(
    INCORPORATION_COUNTRY_ID,
    "Where is your existing company incorporated?",
    [
        ("uae", "In the UAE"),
        ("other", "In another country"),
    ],
)


# =============================================================================
# FLOW: NEW COMPANY
# =============================================================================

QUESTIONS_NEW_COMPANY: tuple[Question, ...] = (
    _q(
        "business_activity",
        "What is your planned business activity?",
        [
            ("agriculture", "Agriculture"),
            ("apparel", "Apparel"),
            ("banking", "Banking"),
            ("consulting", "Consulting"),
            ("biotechnology", "Biotechnology"),
            ("chemicals", "Chemicals"),
            ("communication", "Communication"),
            ("media", "Media"),
            ("other", "Other"),
        ],
        subtext="Choose one that best describes your business",
    ),
    _q(
        "setup_reason",
        "What is the main reason you're setting up a company in the UAE?",
        [
            ("foreign_ownership", "100% foreign ownership"),
            ("tax_optimization", "Tax optimization"),
            ("uae_market", "Access to UAE market"),
            ("gcc_market", "Access to GCC market"),
            ("residency_visa", "Residency visa"),
            ("investor_friendly", "Investor-friendly regulations"),
            ("other", "Other"),
        ],
        subtext="Select one",
    ),
    _q(
        "shareholders_count",
        "How many shareholders will your company have?",
        [
            ("1", "1"),
            ("2-5", "2-5"),
            ("more_than_5", "More than 5"),
        ],
    ),
    _q(
        "shareholder_nationalities",
        "What are the nationalities of the shareholders?",
        [
            ("uae", "UAE National"),
            ("gcc", "GCC National"),
            ("non_gcc", "Non-GCC National"),
            ("mixed", "Mixed"),
        ],
    ),
    _q(
        "physical_office",
        "Will your business require a physical office space?",
        [
            ("yes", "Yes"),
            ("no", "No"),
            ("not_sure", "Not sure yet"),
        ],
    ),
    _q(
        "initial_capital",
        "What is your estimated initial capital investment?",
        [
            ("below_50k", "Below AED 50,000"),
            ("50k_150k", "AED 50,000 - 150,000"),
            ("above_150k", "Above AED 150,000"),
            ("no_answer", "Prefer not to say"),
        ],
    ),
    _q(
        "additional_services",
        "Would you like assistance with any of the following?",
        [
            ("bank_account", "Opening a business bank account"),
            ("visa_residency", "Visa & Residency setup"),
            ("accounting_tax", "Accounting & Tax registration"),
            ("insurance", "Insurance setup"),
            ("medical", "Medical appointment"),
            (ALL_OPTION_ID, "All of the above"),
        ],
        subtext="Select all that apply",
        multi_select=True,
    ),
)


# =============================================================================
# FLOW: EXISTING UAE COMPANY
# =============================================================================

QUESTIONS_EXISTING_UAE: tuple[Question, ...] = (
    _q(
        "license_authority",
        "Where is your company currently licensed?",
        [
            ("mainland", "Mainland (DED)"),
            ("free_zone", "Free zone"),
            ("offshore", "Offshore"),
            ("not_sure", "Not sure"),
        ],
    ),
    _q(
        "company_age",
        "How long has your company been operating?",
        [
            ("less_than_1", "Less than a year"),
            ("1_3", "1-3 years"),
            ("more_than_3", "More than 3 years"),
        ],
    ),
    _q(
        "employee_count",
        "How many employees are on your payroll?",
        [
            ("1_5", "1-5"),
            ("6_20", "6-20"),
            ("21_50", "21-50"),
            ("more_than_50", "More than 50"),
        ],
    ),
    _q(
        "annual_revenue",
        "What is your company's approximate annual revenue?",
        [
            ("below_375k", "Below AED 375,000"),
            ("375k_3m", "AED 375,000 - 3 million"),
            ("above_3m", "Above AED 3 million"),
            ("no_answer", "Prefer not to say"),
        ],
        subtext="This helps us check your VAT and corporate tax obligations",
    ),
    _q(
        "compliance_support",
        "What would you like us to take over?",
        [
            ("license_renewal", "Trade license renewal"),
            ("visa_renewal", "Visa renewals"),
            ("vat_filing", "VAT registration & filing"),
            ("corporate_tax", "Corporate tax registration"),
            ("bookkeeping", "Bookkeeping"),
            (ALL_OPTION_ID, "All of the above"),
        ],
        subtext="Select all that apply",
        multi_select=True,
    ),
)


# =============================================================================
# FLOW: EXISTING COMPANY IN ANOTHER COUNTRY
# =============================================================================

QUESTIONS_EXISTING_OTHER: tuple[Question, ...] = (
    _q(
        "home_jurisdiction",
        "Which region is your company incorporated in?",
        [
            ("gcc", "GCC"),
            ("europe", "Europe"),
            ("north_america", "North America"),
            ("asia", "Asia"),
            ("other", "Other"),
        ],
    ),
    _q(
        "expansion_structure",
        "How would you like to operate in the UAE?",
        [
            ("branch", "Branch of the parent company"),
            ("subsidiary", "New subsidiary"),
            ("representative_office", "Representative office"),
            ("not_sure", "Not sure yet"),
        ],
    ),
    _q(
        "launch_timeline",
        "When do you plan to start operating in the UAE?",
        [
            ("immediately", "As soon as possible"),
            ("3_months", "Within 3 months"),
            ("6_months", "Within 6 months"),
            ("exploring", "Just exploring"),
        ],
    ),
    _q(
        "group_revenue",
        "What is the annual revenue of the parent company?",
        [
            ("below_1m", "Below USD 1 million"),
            ("1m_10m", "USD 1 - 10 million"),
            ("above_10m", "Above USD 10 million"),
            ("no_answer", "Prefer not to say"),
        ],
    ),
    _q(
        "staff_relocation",
        "Will any staff relocate to the UAE?",
        [
            ("yes", "Yes"),
            ("no", "No"),
            ("not_sure", "Not sure yet"),
        ],
    ),
    _q(
        "expansion_support",
        "Which services do you need for the expansion?",
        [
            ("document_attestation", "Parent company document attestation"),
            ("bank_account", "Opening a business bank account"),
            ("visa_residency", "Visa & Residency setup"),
            ("office_space", "Office space"),
            ("accounting_tax", "Accounting & Tax registration"),
            (ALL_OPTION_ID, "All of the above"),
        ],
        subtext="Select all that apply",
        multi_select=True,
    ),
)


# =============================================================================
# COMPLETION
# =============================================================================

SERVICES_NEW = Completion(
    key="services_new",
    message="Great! We're ready to create your personalized incorporation plan.",
    services=(
        "Company formation & trade license",
        "Business activity approval",
        "Business bank account opening",
        "Visa & residency processing",
        "Accounting & tax registration",
    ),
)

SERVICES_EXISTING_UAE = Completion(
    key="services_existing_uae",
    message=(
        "Great! We'll help you switch to incorpify. "
        "Please leave your contact details and we'll be in touch soon."
    ),
    services=(
        "Seamless transfer of your company administration",
        "Trade license renewals",
        "Visa renewals",
        "VAT & corporate tax compliance",
        "Bookkeeping",
    ),
)

SERVICES_EXISTING_OTHER = Completion(
    key="services_existing_other",
    message="Great! We're ready to plan your UAE expansion.",
    services=(
        "Branch or subsidiary setup",
        "Parent company document attestation",
        "Business bank account opening",
        "Visa & residency for relocating staff",
        "Accounting & tax registration",
    ),
)


# =============================================================================
# CATALOG
# =============================================================================

AnswerValue = Union[str, list]


class QuestionCatalog:
    """
    Read-only index over all chat questions.

    Validates on construction that question ids are unique across every
    sequence and that multi-select questions define the "all" option.
    """

    def __init__(
        self,
        seed: Sequence[Question] = SEED_QUESTIONS,
        incorporation_country: Question = INCORPORATION_COUNTRY_QUESTION,
        new_company: Sequence[Question] = QUESTIONS_NEW_COMPANY,
        existing_uae: Sequence[Question] = QUESTIONS_EXISTING_UAE,
        existing_other: Sequence[Question] = QUESTIONS_EXISTING_OTHER,
        completions: Optional[Mapping[str, Completion]] = None,
    ):
        self.seed = tuple(seed)
        self.incorporation_country = incorporation_country
        self.new_company = tuple(new_company)
        self.existing_uae = tuple(existing_uae)
        self.existing_other = tuple(existing_other)
        self.completions = dict(completions or {
            "new": SERVICES_NEW,
            "existing_uae": SERVICES_EXISTING_UAE,
            "existing_other": SERVICES_EXISTING_OTHER,
        })

        self._by_id: dict[str, Question] = {}
        for question in self._all_questions():
            if question.id in self._by_id:
                raise CatalogIntegrityError(f"Duplicate question id: '{question.id}'")
            if question.multi_select and not question.has_all_option:
                raise CatalogIntegrityError(
                    f"Multi-select question '{question.id}' has no '{ALL_OPTION_ID}' option"
                )
            self._by_id[question.id] = question

        for branch_id in BRANCH_QUESTION_IDS:
            if branch_id not in self._by_id:
                raise CatalogIntegrityError(f"Catalog is missing branch question '{branch_id}'")
            if self._by_id[branch_id].multi_select:
                raise CatalogIntegrityError(f"Branch question '{branch_id}' cannot be multi-select")

        for flow in ("new", "existing_uae", "existing_other"):
            if not self.get_sequence(flow):
                raise CatalogIntegrityError(f"Flow '{flow}' has no questions")
            if flow not in self.completions:
                raise CatalogIntegrityError(f"Flow '{flow}' has no completion services")

    def _all_questions(self) -> Iterable[Question]:
        yield from self.seed
        yield self.incorporation_country
        yield from self.new_company
        yield from self.existing_uae
        yield from self.existing_other

    @property
    def entry_question(self) -> Question:
        return self.get_question(COMPANY_STATUS_ID)

    def get_question(self, question_id: str) -> Question:
        """Look up a question by id. Unknown ids raise UnknownQuestionError."""
        try:
            return self._by_id[question_id]
        except KeyError:
            raise UnknownQuestionError(question_id) from None

    def get_sequence(self, flow: str) -> tuple[Question, ...]:
        """Get all questions of a terminal flow, in order."""
        key = getattr(flow, "value", flow)
        sequences = {
            "new": self.new_company,
            "existing_uae": self.existing_uae,
            "existing_other": self.existing_other,
        }
        if key not in sequences:
            raise CatalogIntegrityError(f"Unknown flow: '{key}'")
        return sequences[key]

    def get_completion(self, flow: str) -> Completion:
        key = getattr(flow, "value", flow)
        if key not in self.completions:
            raise CatalogIntegrityError(f"No completion defined for flow '{key}'")
        return self.completions[key]

    def ordered_question_ids(self) -> list[str]:
        """Master display order of every question id, without duplicates."""
        seen: dict[str, None] = {}
        seen[COMPANY_STATUS_ID] = None
        seen[INCORPORATION_COUNTRY_ID] = None
        for question in self._all_questions():
            seen.setdefault(question.id, None)
        return list(seen)

    def answer_text(self, question_id: str, value: AnswerValue) -> str:
        """Display text for a recorded answer (multi-select joined with ", ")."""
        question = self.get_question(question_id)
        values = value if isinstance(value, (list, tuple)) else [value]
        texts = []
        for option_id in values:
            option = question.get_option(option_id)
            texts.append(option.text if option else str(option_id))
        return ", ".join(texts)

    def describe_answers(self, answers: Mapping[str, AnswerValue]) -> list[dict]:
        """
        Render an answer record as ordered rows for lead-detail display.

        Questions the lead never answered are left out, as are answer keys
        that no longer exist in the catalog.
        """
        rows = []
        for question_id in self.ordered_question_ids():
            if question_id not in answers:
                continue
            value = answers[question_id]
            if isinstance(value, (list, tuple)) and not value:
                continue
            rows.append({
                "question_id": question_id,
                "question": self._by_id[question_id].text,
                "answer": self.answer_text(question_id, value),
            })
        return rows

    def to_dict(self) -> dict:
        return {
            "seed": [q.to_dict() for q in self.seed],
            "incorporation_country": self.incorporation_country.to_dict(),
            "flows": {
                flow: [q.to_dict() for q in self.get_sequence(flow)]
                for flow in ("new", "existing_uae", "existing_other")
            },
            "completions": {
                flow: {"key": c.key, "message": c.message, "services": list(c.services)}
                for flow, c in self.completions.items()
            },
        }


DEFAULT_CATALOG = QuestionCatalog()
