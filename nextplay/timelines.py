# nextplay/timelines.py
"""Suggested recovery timelines by injury type, and recovery progress."""
from dataclasses import dataclass, field
from typing import List, Optional

RESTING = "Resting"
LIGHT_ACTIVITY = "Light Activity"
FULL_PLAY = "Full Play"

_PROGRESS = {RESTING: 33, LIGHT_ACTIVITY: 66, FULL_PLAY: 100}

DEFAULT_DAYS = 21


@dataclass(frozen=True)
class Timeline:
    type: str
    suggested_days: int
    description: str
    tips: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "suggestedDays": self.suggested_days,
            "description": self.description,
            "tips": list(self.tips),
        }


TIMELINES: List[Timeline] = [
    Timeline("Ankle Sprain", 14,
             "Mild to moderate ankle sprains typically require 2-4 weeks of rest and rehabilitation.",
             ["RICE method: Rest, Ice, Compression, Elevation",
              "Gradual return to activity with proper support",
              "Strengthening exercises for ankle stability"]),
    Timeline("Knee Injury", 28,
             "Knee injuries can range from minor strains to more serious ligament damage.",
             ["Avoid activities that cause pain or swelling",
              "Strengthen surrounding muscles",
              "Consider physical therapy for proper rehabilitation"]),
    Timeline("Concussion", 21,
             "Concussions require careful management and gradual return to activity.",
             ["Complete rest from physical and cognitive activities",
              "Follow doctor's recommendations for return to play",
              "Monitor for any worsening symptoms"]),
    Timeline("Shoulder Injury", 21,
             "Shoulder injuries often require rest and specific rehabilitation exercises.",
             ["Avoid overhead activities initially",
              "Strengthen rotator cuff muscles",
              "Gradual return to throwing or overhead sports"]),
    Timeline("Back Strain", 14,
             "Back strains typically improve with rest and proper body mechanics.",
             ["Maintain good posture", "Avoid heavy lifting",
              "Gentle stretching and core strengthening"]),
    Timeline("Wrist Injury", 14,
             "Wrist injuries often heal well with proper rest and support.",
             ["Use wrist support if recommended", "Avoid repetitive motions",
              "Gradual return to gripping activities"]),
    Timeline("Hamstring Strain", 21,
             "Hamstring strains require careful rehabilitation to prevent re-injury.",
             ["Gentle stretching after initial rest period",
              "Strengthen hamstring and glute muscles",
              "Gradual return to running and jumping"]),
    Timeline("Groin Strain", 14,
             "Groin strains need rest and specific rehabilitation exercises.",
             ["Avoid activities that cause pain", "Gentle stretching of adductor muscles",
              "Gradual return to lateral movements"]),
    Timeline("Shin Splints", 21,
             "Shin splints require rest and addressing underlying causes.",
             ["Reduce impact activities", "Proper footwear and orthotics if needed",
              "Strengthen lower leg muscles"]),
    Timeline("Elbow Injury", 14,
             "Elbow injuries often respond well to rest and proper rehabilitation.",
             ["Avoid repetitive motions", "Strengthen forearm muscles",
              "Gradual return to throwing or gripping activities"]),
    Timeline("Broken Bone", 42,
             "Broken bones require proper immobilization and healing time.",
             ["Follow doctor's immobilization instructions",
              "Maintain good nutrition for bone healing",
              "Gradual return to activity after clearance"]),
    Timeline("Fracture", 42,
             "Fractures need proper medical treatment and healing time.",
             ["Seek immediate medical attention", "Follow immobilization protocol",
              "Physical therapy for strength and mobility"]),
    Timeline("ACL Tear", 180,
             "ACL tears often require surgical intervention and extensive rehabilitation.",
             ["Consult with orthopedic specialist", "Pre-surgery physical therapy",
              "Post-surgery rehabilitation program"]),
    Timeline("Meniscus Tear", 90,
             "Meniscus tears may require surgery and rehabilitation.",
             ["Consult with orthopedic specialist", "Follow rehabilitation protocol",
              "Gradual return to sports activities"]),
]


def suggested_timeline(injury_type: str) -> Timeline:
    """Substring match either way, case-insensitive; generic 21 days otherwise."""
    wanted = (injury_type or "").strip().lower()
    if wanted:
        for t in TIMELINES:
            known = t.type.lower()
            if wanted in known or known in wanted:
                return t
    return Timeline(
        injury_type,
        DEFAULT_DAYS,
        "Consult with a healthcare professional for specific recovery guidelines.",
        ["Follow RICE method: Rest, Ice, Compression, Elevation",
         "Avoid activities that cause pain",
         "Gradual return to activity",
         "Seek medical attention if symptoms worsen"],
    )


def progress_percentage(status: Optional[str]) -> int:
    return _PROGRESS.get(status, 0)
