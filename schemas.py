from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Union, Literal

ChatRole = Literal["user", "assistant"]
UploadKind = Literal["brief", "sheet", "unknown"]

FALLBACK_DOMAIN_NAME = "Unbekannt"


def _str_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, list):
        return [str(v) for v in value]
    return [str(value)]


# ---- Briefs ----

@dataclass
class BriefListItem:
    id: str
    title: Optional[str] = None
    domain_id: Optional[str] = None
    status: Optional[str] = None
    version: Optional[int] = None
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BriefListItem":
        return cls(
            id=str(d["id"]),
            title=d.get("title"),
            domain_id=d.get("domain_id"),
            status=d.get("status"),
            version=d.get("version"),
            created_at=d.get("created_at") or "",
        )


@dataclass
class BriefDetail(BriefListItem):
    raw_markdown: str = ""
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "BriefDetail":
        base = BriefListItem.from_dict(d)
        return cls(
            **asdict(base),
            raw_markdown=d.get("raw_markdown") or "",
            updated_at=d.get("updated_at"),
        )


# ---- Sheets ----

@dataclass
class SheetListItem:
    id: str
    name: Optional[str] = None
    theme: Optional[str] = None
    status: Optional[str] = None
    version: Optional[int] = None
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SheetListItem":
        return cls(
            id=str(d["id"]),
            name=d.get("name"),
            theme=d.get("theme"),
            status=d.get("status"),
            version=d.get("version"),
            created_at=d.get("created_at") or "",
        )


@dataclass
class SheetDetail(SheetListItem):
    theme_target_descr: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SheetDetail":
        base = SheetListItem.from_dict(d)
        return cls(**asdict(base), theme_target_descr=d.get("theme_target_descr"))


@dataclass
class SheetQuestion:
    code: str = ""
    question: str = ""
    checkpoints: List[str] = field(default_factory=list)
    order_index: int = 0
    active: bool = True
    id: Optional[str] = None
    sheet_id: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SheetQuestion":
        active = d.get("active")
        return cls(
            code=d.get("code") or "",
            question=d.get("question") or "",
            checkpoints=_str_list(d.get("checkpoints")),
            order_index=int(d.get("order_index") or 0),
            active=True if active is None else bool(active),
            id=d.get("id"),
            sheet_id=d.get("sheet_id"),
            created_at=d.get("created_at"),
            updated_at=d.get("updated_at"),
        )

    def to_payload(self) -> Dict[str, Any]:
        """Body for the bulk upsert; new questions go without an id."""
        payload: Dict[str, Any] = {
            "code": self.code,
            "question": self.question,
            "checkpoints": list(self.checkpoints),
            "order_index": self.order_index,
            "active": self.active,
        }
        if self.id:
            payload["id"] = self.id
        return payload


# ---- Domains ----

@dataclass
class Domain:
    id: str
    name: str
    description: Optional[str] = None
    created_at: str = ""

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Domain":
        return cls(
            id=str(d["id"]),
            name=d.get("name") or "",
            description=d.get("description"),
            created_at=d.get("created_at") or "",
        )

    @property
    def is_fallback(self) -> bool:
        return is_fallback_domain(self.name)


def is_fallback_domain(name: Optional[str]) -> bool:
    return (name or "").strip().casefold() == FALLBACK_DOMAIN_NAME.casefold()


# ---- Scorecard (read-only) ----

@dataclass
class ScorecardQuestionEntry:
    question_id: str
    question_code: str = ""
    question: str = ""
    baseline_score_1_5: Optional[float] = None
    interview_adjusted_score_1_5: Optional[float] = None
    final_score_1_5: Optional[float] = None
    reasoning: str = ""
    evidence_from_interviews: List[str] = field(default_factory=list)
    recommended_brief_updates: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ScorecardQuestionEntry":
        return cls(
            question_id=str(d.get("question_id") or d.get("question_code") or ""),
            question_code=d.get("question_code") or "",
            question=d.get("question") or "",
            baseline_score_1_5=d.get("baseline_score_1_5"),
            interview_adjusted_score_1_5=d.get("interview_adjusted_score_1_5"),
            final_score_1_5=d.get("final_score_1_5"),
            reasoning=d.get("reasoning") or "",
            evidence_from_interviews=_str_list(d.get("evidence_from_interviews")),
            recommended_brief_updates=_str_list(d.get("recommended_brief_updates")),
        )


@dataclass
class ScorecardSheetSummary:
    baseline_avg_score_1_5: Optional[float] = None
    interview_adjusted_avg_score_1_5: Optional[float] = None
    final_level_1_5: Optional[float] = None
    main_gaps: List[str] = field(default_factory=list)
    priority_updates: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "ScorecardSheetSummary":
        d = d or {}
        return cls(
            baseline_avg_score_1_5=d.get("baseline_avg_score_1_5"),
            interview_adjusted_avg_score_1_5=d.get("interview_adjusted_avg_score_1_5"),
            final_level_1_5=d.get("final_level_1_5"),
            main_gaps=_str_list(d.get("main_gaps")),
            priority_updates=_str_list(d.get("priority_updates")),
        )


@dataclass
class ScorecardResponse:
    brief_id: str
    sheet_id: str
    theme: Optional[str] = None
    per_question: List[ScorecardQuestionEntry] = field(default_factory=list)
    sheet_summary: ScorecardSheetSummary = field(default_factory=ScorecardSheetSummary)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ScorecardResponse":
        return cls(
            brief_id=str(d.get("brief_id") or ""),
            sheet_id=str(d.get("sheet_id") or ""),
            theme=d.get("theme"),
            per_question=[ScorecardQuestionEntry.from_dict(q) for q in d.get("per_question") or []],
            sheet_summary=ScorecardSheetSummary.from_dict(d.get("sheet_summary")),
        )


# ---- Upload ----

@dataclass
class UploadBriefResult:
    brief_id: str
    title: str = ""
    version: Optional[int] = None
    warnings: List[str] = field(default_factory=list)
    kind: UploadKind = "brief"


@dataclass
class UploadSheetResult:
    sheet_id: str
    theme: str = ""
    questions_imported: int = 0
    warnings: List[str] = field(default_factory=list)
    kind: UploadKind = "sheet"


@dataclass
class UploadUnknownResult:
    warnings: List[str] = field(default_factory=list)
    kind: UploadKind = "unknown"


UploadResult = Union[UploadBriefResult, UploadSheetResult, UploadUnknownResult]


def upload_result_from_dict(d: Dict[str, Any]) -> UploadResult:
    kind = d.get("kind")
    warnings = _str_list(d.get("warnings"))
    if kind == "brief":
        return UploadBriefResult(
            brief_id=str(d["brief_id"]),
            title=d.get("title") or "",
            version=d.get("version"),
            warnings=warnings,
        )
    if kind == "sheet":
        return UploadSheetResult(
            sheet_id=str(d["sheet_id"]),
            theme=d.get("theme") or "",
            questions_imported=int(d.get("questions_imported") or 0),
            warnings=warnings,
        )
    return UploadUnknownResult(warnings=warnings)


# ---- Chat (client-only, never persisted) ----

@dataclass
class ChatMessage:
    role: ChatRole
    content: str
    meta: Optional[Dict[str, Any]] = None

    def to_history_item(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class ChatApiResult:
    answer: str
    raw_answer: str
    meta: Optional[Dict[str, Any]] = None


@dataclass
class InterviewContext:
    brief: Optional[Dict[str, Any]] = None
    interview: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "InterviewContext":
        d = d or {}
        rows = d.get("interview") or []
        return cls(
            brief=d.get("brief") or None,
            interview=[r for r in rows if isinstance(r, dict)],
        )

    @property
    def brief_title(self) -> Optional[str]:
        return (self.brief or {}).get("title")

    @property
    def brief_markdown(self) -> str:
        return (self.brief or {}).get("raw_markdown") or ""
