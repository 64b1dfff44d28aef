"""
Printable itinerary documents.

render_itinerary() turns an itinerary snapshot into an ItineraryDocument: a
flat, ordered list of sections (optional branding header, header,
highlights, then per day the day header, one section per event and an
optional meals section, then additional sections and an optional branding
footer). build_pdf() lays such a document out with reportlab. Pagination is
left to reportlab's flowable engine; no page breaks are inserted here.
"""
from collections.abc import Mapping, Sequence
from io import BytesIO
from typing import Any, List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import KeepTogether, Paragraph, SimpleDocTemplate, Spacer

from schemas import DocumentElement, DocumentSection, ItineraryDocument
from services.errors import InvalidArgument

MEALS = (("breakfast", "Breakfast"), ("lunch", "Lunch"), ("dinner", "Dinner"))

KNOWN_SECTIONS = (
    ("terms", "Terms & Conditions"),
    ("visas", "Visa Information"),
    ("inclusions", "Package Inclusions"),
    ("exclusions", "Package Exclusions"),
    ("notes", "Important Notes"),
)


def _get(obj: Any, key: str, default: Any = None) -> Any:
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        value = obj.get(key, default)
    else:
        value = getattr(obj, key, default)
    return default if value is None else value


def _snapshot(itinerary: Any) -> Any:
    # pydantic models are dumped so days/events/meals can be read uniformly
    if hasattr(itinerary, "model_dump"):
        return itinerary.model_dump()
    return itinerary


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _count(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _header(itinerary: Any) -> DocumentSection:
    days = _count(_get(itinerary, "day_count", 0))
    nights = _count(_get(itinerary, "night_count", 0))
    return DocumentSection(kind="header", elements=[
        DocumentElement(style="title", text=_text(_get(itinerary, "title", ""))),
        DocumentElement(style="text", text=_text(_get(itinerary, "description", ""))),
        DocumentElement(style="text", text=_text(_get(itinerary, "country", ""))),
        DocumentElement(style="text", text=f"{days} Days • {nights} Nights"),
    ])


def _highlights(itinerary: Any) -> Optional[DocumentSection]:
    highlights = _get(itinerary, "highlights", [])
    if not _is_sequence(highlights) or not highlights:
        return None
    elements = [DocumentElement(style="heading", text="Highlights")]
    elements += [DocumentElement(style="highlight", text=_text(h)) for h in highlights]
    return DocumentSection(kind="highlights", elements=elements)


def _event(event: Any, day_number: int) -> DocumentSection:
    elements = [
        DocumentElement(style="event_title", text=_text(_get(event, "title", ""))),
        DocumentElement(style="text", text=_text(_get(event, "description", ""))),
    ]
    time = _get(event, "time")
    if time:
        elements.append(DocumentElement(style="text", text=f"Time: {time}"))
    location = _get(event, "location")
    if location:
        elements.append(DocumentElement(style="text", text=f"Location: {location}"))
    return DocumentSection(kind="event", day=day_number, elements=elements)


def _meals(day: Any, day_number: int) -> Optional[DocumentSection]:
    meals = _get(day, "meals")
    if meals is None:
        return None
    elements = [DocumentElement(style="event_title", text="Meals")]
    for key, label in MEALS:
        if _get(meals, key, False) is True:
            elements.append(DocumentElement(style="meal", text=f"{label} included"))
    return DocumentSection(kind="meals", day=day_number, elements=elements)


def _branding(itinerary: Any, kind: str, logo_key: str, text_key: str) -> Optional[DocumentSection]:
    branding = _get(itinerary, "branding")
    elements = []
    logo = _get(branding, logo_key)
    if logo:
        elements.append(DocumentElement(style="logo", text=_text(logo)))
    text = _text(_get(branding, text_key)).strip()
    if text:
        elements.append(DocumentElement(style="branding", text=text))
    if not elements:
        return None
    return DocumentSection(kind=kind, elements=elements)


def _additional(itinerary: Any) -> List[DocumentSection]:
    sections = _get(itinerary, "additional_sections", {})
    if not isinstance(sections, Mapping):
        return []
    known = dict(KNOWN_SECTIONS)
    keys = [key for key, _ in KNOWN_SECTIONS] + [key for key in sections if key not in known]
    result = []
    for key in keys:
        content = _text(sections.get(key)).strip()
        if not content:
            continue
        title = known.get(key) or key.replace("_", " ").title()
        result.append(DocumentSection(kind="additional", elements=[
            DocumentElement(style="heading", text=title),
            DocumentElement(style="text", text=content),
        ]))
    return result


def render_itinerary(itinerary: Any) -> ItineraryDocument:
    """
    Build the printable structure of an itinerary.

    Accepts a mapping or a pydantic model. Optional fields may be missing;
    `days` may not, and must be a list.
    """
    snapshot = _snapshot(itinerary)
    days = _get(snapshot, "days")
    if not _is_sequence(days):
        raise InvalidArgument("Itinerary days must be a list")

    sections = []
    branding_header = _branding(snapshot, "branding_header", "header_logo", "header_text")
    if branding_header:
        sections.append(branding_header)
    sections.append(_header(snapshot))
    highlights = _highlights(snapshot)
    if highlights:
        sections.append(highlights)

    for index, day in enumerate(days):
        day_number = index + 1
        sections.append(DocumentSection(kind="day", day=day_number, elements=[
            DocumentElement(style="day_header", text=f"Day {day_number}"),
        ]))
        events = _get(day, "events", [])
        if not _is_sequence(events):
            raise InvalidArgument(f"Events of day {day_number} must be a list")
        sections.extend(_event(event, day_number) for event in events)
        meals = _meals(day, day_number)
        if meals:
            sections.append(meals)

    sections.extend(_additional(snapshot))
    branding_footer = _branding(snapshot, "branding_footer", "footer_logo", "footer_text")
    if branding_footer:
        sections.append(branding_footer)

    branding = _get(snapshot, "branding")
    return ItineraryDocument(
        title=_text(_get(snapshot, "title", "")),
        primary_color=_text(_get(branding, "primary_color")) or None,
        secondary_color=_text(_get(branding, "secondary_color")) or None,
        sections=sections,
    )


def _color(value: Optional[str], default: str) -> colors.Color:
    # branding colours are free text; anything that is not hex falls back
    if value:
        try:
            return colors.HexColor(value)
        except (TypeError, ValueError):
            pass
    return colors.HexColor(default)


def _styles(document: ItineraryDocument) -> dict:
    sample = getSampleStyleSheet()
    text = ParagraphStyle("ItineraryText", parent=sample["Normal"], fontSize=12, leading=15, spaceAfter=5)
    primary = _color(document.primary_color, "#E8F3FF")
    secondary = _color(document.secondary_color, "#059669")
    return {
        "title": ParagraphStyle("ItineraryTitle", parent=sample["Title"], fontSize=24, leading=28,
                                alignment=0, spaceAfter=10),
        "heading": ParagraphStyle("ItineraryHeading", parent=sample["Heading2"], fontSize=18, spaceAfter=10),
        "day_header": ParagraphStyle("ItineraryDay", parent=sample["Heading3"], fontSize=16, spaceBefore=15,
                                     spaceAfter=10, backColor=primary, borderPadding=8,
                                     textColor=colors.white if document.primary_color else colors.black),
        "event_title": ParagraphStyle("ItineraryEventTitle", parent=text, fontName="Helvetica-Bold"),
        "branding_header": ParagraphStyle("ItineraryBrandingHeader", parent=sample["Heading2"], fontSize=18,
                                          textColor=_color(document.primary_color, "#1f2937")),
        "branding_footer": ParagraphStyle("ItineraryBrandingFooter", parent=text, fontSize=10,
                                          textColor=secondary),
        "meal": text,
        "text": text,
    }


def _highlight_tags(elements: List[DocumentElement]) -> str:
    tags = [
        f'<font backColor="#f3f4f6">&nbsp;{escape(e.text)}&nbsp;</font>'
        for e in elements if e.style == "highlight"
    ]
    return "&nbsp;&nbsp;".join(tags)


def build_pdf(document: ItineraryDocument) -> bytes:
    """Lay out a rendered itinerary as an A4 PDF and return its bytes."""
    styles = _styles(document)
    story = []
    for section in document.sections:
        flowables = []
        for element in section.elements:
            # logos are remote URLs and are not fetched
            if element.style in ("highlight", "logo"):
                continue
            if element.style == "branding":
                style = styles.get(section.kind, styles["text"])
            else:
                style = styles.get(element.style, styles["text"])
            flowables.append(Paragraph(escape(element.text).replace("\n", "<br/>"), style))
        if section.kind == "highlights":
            flowables.append(Paragraph(_highlight_tags(section.elements), styles["text"]))
        if section.kind in ("event", "meals"):
            story.append(KeepTogether(flowables))
        else:
            story.extend(flowables)
        story.append(Spacer(1, 6))

    buffer = BytesIO()
    pdf = SimpleDocTemplate(buffer, pagesize=A4, leftMargin=30, rightMargin=30, topMargin=30,
                            bottomMargin=30, title=document.title)
    pdf.build(story)
    return buffer.getvalue()
