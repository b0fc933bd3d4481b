"""
Module: render.standards

Purpose:
    Standard field names for proposal templates. Templates that use these
    names (or one of their aliases) can be mapped to proposal records
    without per-template configuration, and the designer can report which
    standard fields a template still lacks.

Key Classes:
    - FieldStandard: One standard field with aliases and metadata
    - CoverageReport: Result of analyze_template_coverage()

Key Functions:
    - find_field_standard(): Case-insensitive, alias-aware lookup
    - required_standards(): Standards every proposal template should have
    - fields_by_category(): Standards grouped for display
    - analyze_template_coverage(): Compare a template with the standards
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

from belge_toolkit.core.models import Template


@dataclass(frozen=True)
class FieldStandard:
    """Recommended field name with its accepted aliases."""

    field_name: str
    alternative_names: Tuple[str, ...]
    data_type: str
    category: str
    description: str
    required: bool
    example: str

    def matches(self, name: str) -> bool:
        lowered = name.lower()
        return lowered == self.field_name.lower() or any(
            lowered == alt.lower() for alt in self.alternative_names
        )


PROPOSAL_FIELD_STANDARDS: Tuple[FieldStandard, ...] = (
    # Teklif bilgileri
    FieldStandard("proposalNumber", ("proposal_number", "teklifNo", "number", "no"), "text",
                  "Teklif Bilgileri", "Teklif numarası", True, "TEK-2025-001"),
    FieldStandard("proposalTitle", ("proposal_title", "teklifBaslik", "title", "baslik"), "text",
                  "Teklif Bilgileri", "Teklif başlığı", True, "Yazılım Geliştirme Hizmeti"),
    FieldStandard("proposalDate", ("proposal_date", "teklifTarih", "date", "tarih"), "date",
                  "Teklif Bilgileri", "Teklif tarihi", True, "15.01.2025"),
    FieldStandard("proposalValidUntil", ("valid_until", "gecerlilik", "validUntil", "gecerli"), "date",
                  "Teklif Bilgileri", "Geçerlilik tarihi", True, "15.02.2025"),
    FieldStandard("proposalStatus", ("proposal_status", "durum", "status"), "text",
                  "Teklif Bilgileri", "Teklif durumu", False, "Gönderildi"),
    # Müşteri bilgileri
    FieldStandard("customerName", ("customer_name", "musteriAd", "musteri", "customer"), "text",
                  "Müşteri Bilgileri", "Müşteri adı", True, "ABC Teknoloji"),
    FieldStandard("customerCompany", ("customer_company", "musteriSirket", "customerSirket"), "text",
                  "Müşteri Bilgileri", "Müşteri şirket adı", False, "ABC Teknoloji Ltd. Şti."),
    FieldStandard("customerEmail", ("customer_email", "musteriEmail"), "text",
                  "Müşteri Bilgileri", "Müşteri e-posta adresi", False, "info@abcteknoloji.com"),
    FieldStandard("customerAddress", ("customer_address", "musteriAdres"), "text",
                  "Müşteri Bilgileri", "Müşteri adresi", False, "İstanbul, Türkiye"),
    # Satış temsilcisi
    FieldStandard("employeeName", ("employee_name", "satisTemsilci", "employee", "temsilci"), "text",
                  "Satış Temsilcisi", "Satış temsilcisi adı", True, "Mehmet Yılmaz"),
    FieldStandard("employeeTitle", ("employee_title", "temsilciUnvan"), "text",
                  "Satış Temsilcisi", "Satış temsilcisi ünvanı", False, "Satış Danışmanı"),
    FieldStandard("employeeEmail", ("employee_email", "temsilciEmail"), "text",
                  "Satış Temsilcisi", "Satış temsilcisi e-posta", False, "mehmet@example.com"),
    # Finansal bilgiler
    FieldStandard("totalAmount", ("total_amount", "genelToplam", "toplam", "total", "tutar"), "text",
                  "Finansal Bilgiler", "Toplam tutar", True, "13.000,00 ₺"),
    FieldStandard("subtotal", ("ara_toplam", "araToplam", "subTotal"), "text",
                  "Finansal Bilgiler", "Ara toplam (KDV hariç)", False, "10.833,33 ₺"),
    FieldStandard("taxAmount", ("tax_amount", "kdvTutar", "kdv", "vergi"), "text",
                  "Finansal Bilgiler", "KDV tutarı", False, "2.166,67 ₺"),
    FieldStandard("currency", ("para_birimi", "paraBirimi", "doviz"), "text",
                  "Finansal Bilgiler", "Para birimi", False, "TRY"),
    # Ürün/hizmet
    FieldStandard("itemsTable", ("items_table", "urunTablo", "kalemler", "items", "products"), "table",
                  "Ürün/Hizmet", "Ürün/hizmet tablosu", True, "Tablo formatında ürün listesi"),
    FieldStandard("itemCount", ("item_count", "kalemSayisi", "urunSayisi"), "text",
                  "Ürün/Hizmet", "Toplam kalem sayısı", False, "3 kalem"),
    # Şirket bilgileri
    FieldStandard("companyName", ("company_name", "sirketAd", "sirket", "company"), "text",
                  "Şirket Bilgileri", "Şirket adı", True, "ÖRNEK TEKNOLOJİ"),
    FieldStandard("companyLogo", ("company_logo", "sirketLogo", "logo"), "image",
                  "Şirket Bilgileri", "Şirket logosu", False, "Logo resmi"),
    FieldStandard("companyAddress", ("company_address", "sirketAdres", "address"), "text",
                  "Şirket Bilgileri", "Şirket adresi", False, "İstanbul, Türkiye"),
    # Şartlar
    FieldStandard("paymentTerms", ("payment_terms", "odemeSart", "odemeKosul"), "text",
                  "Şartlar", "Ödeme şartları", False, "30 gün vadeli"),
    FieldStandard("deliveryTerms", ("delivery_terms", "teslimatSart", "teslimat"), "text",
                  "Şartlar", "Teslimat şartları", False, "15 gün içinde"),
    FieldStandard("warrantyTerms", ("warranty_terms", "garantiSart", "garanti"), "text",
                  "Şartlar", "Garanti şartları", False, "1 yıl garanti"),
    # Ek bilgiler
    FieldStandard("notes", ("notlar", "aciklama"), "text",
                  "Ek Bilgiler", "Genel notlar", False, "Ek bilgiler..."),
    FieldStandard("description", ("aciklama", "detay"), "text",
                  "Ek Bilgiler", "Teklif açıklaması", False, "Detaylı açıklama..."),
)


@dataclass(frozen=True)
class CoverageReport:
    """
    Standards coverage of one template.

    Attributes:
        coverage: Percentage of standards matched, rounded to an integer
        missing_required: Required standards no field matches
        matched: (field name, standard) pairs
        unmatched: Field names that match no standard
    """

    coverage: int
    missing_required: Tuple[FieldStandard, ...]
    matched: Tuple[Tuple[str, FieldStandard], ...]
    unmatched: Tuple[str, ...]

    @property
    def is_complete(self) -> bool:
        return not self.missing_required


def find_field_standard(
    name: str,
    standards: Iterable[FieldStandard] = PROPOSAL_FIELD_STANDARDS,
) -> Optional[FieldStandard]:
    """Find the standard a field name (or alias) refers to, ignoring case."""
    for standard in standards:
        if standard.matches(name):
            return standard
    return None


def required_standards(
    standards: Iterable[FieldStandard] = PROPOSAL_FIELD_STANDARDS,
) -> List[FieldStandard]:
    return [s for s in standards if s.required]


def fields_by_category(
    standards: Iterable[FieldStandard] = PROPOSAL_FIELD_STANDARDS,
) -> Dict[str, List[FieldStandard]]:
    groups: Dict[str, List[FieldStandard]] = {}
    for standard in standards:
        groups.setdefault(standard.category, []).append(standard)
    return groups


def analyze_template_coverage(
    template: Union[Template, Iterable[str]],
    standards: Tuple[FieldStandard, ...] = PROPOSAL_FIELD_STANDARDS,
) -> CoverageReport:
    """
    Compare template field names with the standards.

    Args:
        template: Template, or plain field names
        standards: Standards to compare against

    Example:
        >>> report = analyze_template_coverage(["teklifNo", "musteri", "logoUrl"])
        >>> [m[1].field_name for m in report.matched]
        ['proposalNumber', 'customerName']
        >>> report.unmatched
        ('logoUrl',)
    """
    names = template.field_names if isinstance(template, Template) else tuple(template)

    matched: List[Tuple[str, FieldStandard]] = []
    unmatched: List[str] = []
    for name in names:
        standard = find_field_standard(name, standards)
        if standard is None:
            unmatched.append(name)
        else:
            matched.append((name, standard))

    matched_names = {s.field_name for _, s in matched}
    missing = tuple(s for s in required_standards(standards) if s.field_name not in matched_names)
    coverage = round(len(matched_names) / len(standards) * 100) if standards else 0

    return CoverageReport(
        coverage=coverage,
        missing_required=missing,
        matched=tuple(matched),
        unmatched=tuple(unmatched),
    )
