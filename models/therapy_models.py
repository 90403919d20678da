"""
Wire models for CGM report summaries, pump settings and recommendations.
"""
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

CLOCK_PATTERN = r"^(?:(?:[01]?\d|2[0-3]):[0-5]\d|24:00)$"


class RecommendationTypeEnum(str, Enum):
    BASAL = "basal"
    ICR = "icr"
    ISF = "isf"
    TARGET = "target"

class PriorityEnum(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

class RecommendationStatusEnum(str, Enum):
    PENDING = "pending"
    APPLIED = "applied"
    DISMISSED = "dismissed"

class ProblemTypeEnum(str, Enum):
    LOW = "low"
    HIGH = "high"
    VARIABLE = "variable"

class SeverityEnum(str, Enum):
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class TimeInRangePayload(BaseModel):
    """
    Model for the time-in-range breakdown of a report.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    veryLow: float = Field(ge=0, description="Percent below 54 mg/dL")
    low: float = Field(ge=0, description="Percent 54-69 mg/dL")
    inRange: float = Field(ge=0, description="Percent 70-180 mg/dL")
    high: float = Field(ge=0, description="Percent 181-250 mg/dL")
    veryHigh: float = Field(ge=0, description="Percent above 250 mg/dL")


class StatisticsPayload(BaseModel):
    """
    Model for report summary statistics.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    averageGlucose: float = Field(description="Average glucose in mg/dL")
    gmi: float = Field(description="Glucose management indicator")
    standardDeviation: float = Field(description="Standard deviation in mg/dL")
    coefficientOfVariation: float = Field(description="Coefficient of variation (%)")


class HourlyPatternPayload(BaseModel):
    """
    Model for one hour of the ambulatory glucose profile.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    hour: int = Field(ge=0, le=23, description="Hour of day")
    averageGlucose: float = Field(description="Average glucose in mg/dL")
    percentile10: float = Field(description="10th percentile")
    percentile25: float = Field(description="25th percentile")
    percentile50: float = Field(description="Median")
    percentile75: float = Field(description="75th percentile")
    percentile90: float = Field(description="90th percentile")
    timeInRange: float = Field(ge=0, le=100, description="Percent in range for this hour")


class EventsPayload(BaseModel):
    lowEvents: int = Field(ge=0, description="Low events")
    highEvents: int = Field(ge=0, description="High events")


class ReportPeriodPayload(BaseModel):
    startDate: Optional[str] = Field(default=None, description="Start date")
    endDate: Optional[str] = Field(default=None, description="End date")
    days: Optional[int] = Field(default=None, description="Days covered")


class GlucoseSummaryPayload(BaseModel):
    """
    Model for a parsed CGM report summary.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: Optional[str] = Field(default=None, description="Summary ID")
    uploadDate: Optional[str] = Field(default=None, description="Upload timestamp")
    reportPeriod: Optional[ReportPeriodPayload] = Field(default=None, description="Report period")
    timeInRange: TimeInRangePayload = Field(description="Time in range breakdown")
    statistics: StatisticsPayload = Field(description="Summary statistics")
    hourlyPatterns: List[HourlyPatternPayload] = Field(default_factory=list, description="Hourly patterns")
    events: EventsPayload = Field(description="Event counts")


class BasalSegmentPayload(BaseModel):
    id: Optional[str] = Field(default=None, description="Segment ID")
    startTime: str = Field(pattern=CLOCK_PATTERN, description="Start time HH:MM")
    endTime: str = Field(pattern=CLOCK_PATTERN, description="End time HH:MM")
    rate: float = Field(ge=0, description="Basal rate U/hr")


class IcrSegmentPayload(BaseModel):
    id: Optional[str] = Field(default=None, description="Segment ID")
    startTime: str = Field(pattern=CLOCK_PATTERN, description="Start time HH:MM")
    endTime: str = Field(pattern=CLOCK_PATTERN, description="End time HH:MM")
    ratio: float = Field(gt=0, description="Grams of carbohydrate per unit")


class IsfSegmentPayload(BaseModel):
    id: Optional[str] = Field(default=None, description="Segment ID")
    startTime: str = Field(pattern=CLOCK_PATTERN, description="Start time HH:MM")
    endTime: str = Field(pattern=CLOCK_PATTERN, description="End time HH:MM")
    factor: float = Field(gt=0, description="mg/dL drop per unit")


class TherapySettingsPayload(BaseModel):
    """
    Model for pump therapy settings.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    basalSegments: List[BasalSegmentPayload] = Field(default_factory=list, description="Basal schedule")
    icrSegments: List[IcrSegmentPayload] = Field(default_factory=list, description="Carb ratio schedule")
    isfSegments: List[IsfSegmentPayload] = Field(default_factory=list, description="Sensitivity schedule")
    targetLow: float = Field(description="Target range lower bound (mg/dL)")
    targetHigh: float = Field(description="Target range upper bound (mg/dL)")
    activeInsulinTime: float = Field(description="Duration of insulin action (hours)")
    correctionTarget: float = Field(description="Correction target (mg/dL)")


class GoalsPayload(BaseModel):
    targetTIR: float = Field(description="Target time in range (%)")
    targetRangeLow: float = Field(description="Target range low (mg/dL)")
    targetRangeHigh: float = Field(description="Target range high (mg/dL)")
    maxLowPercentage: float = Field(description="Max time below range (%)")
    maxVeryLowPercentage: float = Field(description="Max time below 54 mg/dL (%)")


class TimeRangePayload(BaseModel):
    start: str = Field(pattern=CLOCK_PATTERN, description="Start time HH:MM")
    end: str = Field(pattern=CLOCK_PATTERN, description="End time HH:MM")
    label: str = Field(default="", description="Display label")


class SupportingDataPayload(BaseModel):
    averageGlucose: Optional[int] = Field(default=None, description="Average glucose")
    timeInRange: Optional[int] = Field(default=None, description="Time in range")
    lowEvents: Optional[int] = Field(default=None, description="Low events")
    highEvents: Optional[int] = Field(default=None, description="High events")


class RecommendationPayload(BaseModel):
    """
    Model for a therapy recommendation.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str = Field(description="Recommendation ID")
    type: RecommendationTypeEnum = Field(description="Parameter being adjusted")
    priority: PriorityEnum = Field(description="Priority")
    timeRange: TimeRangePayload = Field(description="Affected time range")
    currentValue: float = Field(description="Current value")
    suggestedValue: float = Field(description="Suggested value")
    changePercent: float = Field(description="Percent change")
    title: str = Field(default="", description="Title")
    rationale: str = Field(default="", description="Rationale")
    supportingData: SupportingDataPayload = Field(default_factory=SupportingDataPayload, description="Supporting data")
    generatedAt: str = Field(description="Generation timestamp")
    status: RecommendationStatusEnum = Field(default=RecommendationStatusEnum.PENDING, description="Status")
    appliedAt: Optional[str] = Field(default=None, description="Applied timestamp")
    dismissedAt: Optional[str] = Field(default=None, description="Dismissed timestamp")
    previousValue: Optional[float] = Field(default=None, description="Value before application")


class ProblemPeriodPayload(BaseModel):
    startHour: int = Field(description="Start hour")
    endHour: int = Field(description="End hour (exclusive)")
    type: ProblemTypeEnum = Field(description="Problem type")
    severity: SeverityEnum = Field(description="Severity")
    averageGlucose: float = Field(description="Average glucose")
    timeInRange: float = Field(description="Time in range")
    description: str = Field(description="Description")


# Request models
class GlucoseSummaryRequest(BaseModel):
    """
    Request model for the report summary API.
    """
    reportId: str = Field(description="Report ID")
