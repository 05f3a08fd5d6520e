"""Questionnaire document builder.

Maps one stored response onto the fixed layout of the paper census form.
The form is a linear sequence of question blocks emitted in paper order;
nothing is reordered by the answers. The only data-driven structure is the
hidden-homelessness section, whose follow-up questions are included only
when their gating question was answered exactly "TAK".

`build` is pure: no store or network access, and malformed or missing
answers degrade to empty boxes instead of raising.
"""

from __future__ import annotations

import logging
from typing import Mapping

from census_service.config import FormConfig
from census_service.logic import form_options as opts
from census_service.logic.answers import AnswerValue, parse_answers, text_answer
from census_service.logic.checkbox import Glyph, is_yes, resolve, yes_no
from census_service.logic.layout import (
    BULLET,
    CONTENT_WIDTH,
    MUTED_COLOR,
    THIRD,
    bold_paragraph,
    cell,
    check_list,
    column_widths,
    full_width_box,
    header_row,
    inline_options,
    paragraph,
    row,
    run,
    section_header,
    table,
    two_col,
    two_col_check_table,
    two_col_table,
)
from census_service.models.document import Alignment, Block, Document, Paragraph, Run, Section
from census_service.models.response import ResponseRecord

logger = logging.getLogger(__name__)

Answers = Mapping[str, AnswerValue]

AGE_PLACEHOLDER = "......"
PLACE_NAME_PLACEHOLDER = "_______________________________________________"


def _yes_no_runs(answers: Answers, key: str) -> Run:
    glyphs = yes_no(answers, key)
    return run(f"{glyphs.yes.value} Tak   {glyphs.no.value} Nie")


def _title(form: FormConfig) -> list[Block]:
    text = (
        "Kwestionariusz osoby w kryzysie bezdomności w ramach Ogólnopolskiego badania "
        f"liczby osób w kryzysie bezdomności – rok badania: {form.year}*"
    )
    return [paragraph([run(text, bold=True)], align=Alignment.CENTER, before=0, after=60)]


def _introduction() -> list[Block]:
    notice = (
        "W przypadku stwierdzenia przez ankietera zagrożenia życia lub zdrowia osoby bezdomnej "
        "należy niezwłocznie powiadomić odpowiednie służby, w tym policję – tel. 112 i 997"
    )
    return [
        table(
            [
                header_row("WSTĘP"),
                row(cell(bold_paragraph(notice, align=Alignment.CENTER), width=CONTENT_WIDTH)),
            ],
            [CONTENT_WIDTH],
        )
    ]


def _interview_status(answers: Answers) -> list[Block]:
    duplicate = Glyph.CHECKED if is_yes(answers, "duplikat") else Glyph.UNCHECKED
    full = resolve(answers, "sposob_wypelnienia", opts.FILL_MODES[0])
    short = resolve(answers, "sposob_wypelnienia", opts.FILL_MODES[1])
    return [
        two_col_table(
            two_col(
                paragraph([
                    run(f"{BULLET} Czy był przeprowadzony z Panią/Panem taki wywiad dzisiaj?  ", bold=True),
                    _yes_no_runs(answers, "wywiad_dzisiaj"),
                ]),
                paragraph([
                    run(f"{BULLET} Czy zgadza się Pan/i na udział w badaniu?  ", bold=True),
                    _yes_no_runs(answers, "zgoda_udzial"),
                ]),
            ),
            two_col(
                paragraph(f"{BULLET} Jeśli tak, zakończyć i zaznaczyć duplikat: {duplicate.value}"),
                paragraph([
                    run(f"{BULLET} Sposób wypełnienia:  ", bold=True),
                    run(f"{full.value} pełny / {short.value} skrócony"),
                ]),
            ),
        ),
        full_width_box(
            paragraph([
                run("UWAGA!!! ", bold=True),
                run(
                    "Pierwszym pytaniem, które należy zadać respondentowi jest pytanie czy w dniu "
                    "dzisiejszym był badany tym wywiadem. Jeśli dana osoba już uczestniczyła w wywiadzie "
                    "prosimy nie rozpoczynać wywiadu. Jeśli z osobą bezdomną z pewnych względów jest "
                    "utrudniony kontakt bądź odmawia wzięcia udziału w badaniu, prosimy o wypełnienie "
                    "kwestionariusza z zaznaczeniem miejsca przebywania, płci, szacowanego wieku. "
                    "W przypadku dzieci (0-17 lat) wypełniamy tylko pytania 1-4 oraz miejsce przebywania."
                ),
            ])
        ),
        paragraph(""),
    ]


def _place(answers: Answers, form: FormConfig) -> list[Block]:
    location = (
        f"Województwo – {form.voivodeship}      Powiat – {form.county}      "
        f"Gmina – {form.commune}      Miejscowość – {form.locality}"
    )
    place_name = text_answer(answers, "miejsce_nazwa") or PLACE_NAME_PLACEHOLDER
    return [
        table(
            [
                header_row("MIEJSCE PRZEPROWADZENIA BADANIA / PRZEBYWANIA OSOBY W KRYZYSIE BEZDOMNOŚCI"),
                row(cell(bold_paragraph(location), width=CONTENT_WIDTH)),
            ],
            [CONTENT_WIDTH],
        ),
        paragraph(
            [run("Czy miasto powyżej 100 tysięcy mieszkańców?  ", bold=True), _yes_no_runs(answers, "miasto_powyzej_100k")],
            before=40,
        ),
        two_col_check_table(answers, "miejsce_pobytu", opts.PLACES, left_count=opts.PLACES_LEFT_COUNT),
        paragraph([run("Po zaznaczeniu proszę wpisać nazwę miejsca/opisać je: "), run(place_name)]),
        paragraph(""),
    ]


def _sex_and_age(answers: Answers) -> list[Block]:
    female = resolve(answers, "p1_plec", opts.SEX[0])
    male = resolve(answers, "p1_plec", opts.SEX[1])
    age = text_answer(answers, "p2_wiek_liczba") or AGE_PLACEHOLDER
    declared, estimated = (resolve(answers, "p2_wiek_typ", o) for o in opts.AGE_TYPE)
    adult, child = (resolve(answers, "p2_wiek_kategoria", o) for o in opts.AGE_CATEGORY)
    return [
        two_col_table(
            two_col(
                paragraph([
                    run("1. Płeć  ", bold=True),
                    run(f"1.1. kobieta {female.value}   1.2. mężczyzna {male.value}"),
                ]),
                [
                    paragraph([
                        run("2. Wiek: ", bold=True),
                        run(f"{age} lat   {declared.value} wiek deklarowany  {estimated.value} wiek oszacowany"),
                    ]),
                    paragraph(f"{adult.value} osoba dorosła (pow. 18 lat)  {child.value} dziecko (0–17 lat)"),
                ],
            )
        )
    ]


def _citizenship(answers: Answers) -> list[Block]:
    return [
        full_width_box(bold_paragraph("3. Obywatelstwo i dane o statusie uchodźcy")),
        two_col_table(
            two_col(
                [bold_paragraph("3.1. Obywatelstwo"), *check_list(answers, "p3_obywatelstwo", opts.CITIZENSHIP)],
                [bold_paragraph("3.2. Status cudzoziemca"), *check_list(answers, "p3_status_cudzoziemca", opts.FOREIGNER_STATUS)],
            )
        ),
    ]


def _registration_and_duration(answers: Answers) -> list[Block]:
    return [
        two_col_table(
            two_col(
                [
                    bold_paragraph("4. Czy posiada Pan(i) zameldowanie na pobyt stały?"),
                    *check_list(answers, "p4_zameldowanie", opts.REGISTRATION),
                ],
                [
                    bold_paragraph("5. Jak długo doświadcza Pan/i bezdomności?"),
                    *check_list(answers, "p5_czas_bezdomnosci", opts.HOMELESSNESS_DURATION),
                ],
            )
        )
    ]


def _household(answers: Answers) -> list[Block]:
    widths = column_widths(THIRD, THIRD, THIRD)
    columns = [
        ("6. Stan cywilny", "p6_stan_cywilny", opts.MARITAL_STATUS),
        ("7. Wykształcenie", "p7_wyksztalcenie", opts.EDUCATION),
        ("8. Z kim obecnie Pani/Pan gospodaruje", "p8_gospodarstwo", opts.HOUSEHOLD),
    ]
    cells = [
        cell([bold_paragraph(title), *check_list(answers, key, options)], width=w)
        for (title, key, options), w in zip(columns, widths)
    ]
    return [table([row(*cells)], widths)]


def _income_and_causes(answers: Answers) -> list[Block]:
    return [
        bold_paragraph(
            "9. Jakie źródła dochodu Pan(i) posiada? (Można zaznaczyć dowolną liczbę odpowiedzi):",
            before=40,
        ),
        two_col_check_table(answers, "p9_dochody", opts.INCOME),
        bold_paragraph(
            "10. Które wydarzenia były według Pana(i) przyczyną bezdomności? (proszę zaznaczyć maksymalnie 3):",
            before=40,
        ),
        two_col_check_table(answers, "p10_przyczyny", opts.CAUSES),
    ]


def _assistance(answers: Answers) -> list[Block]:
    return [
        two_col_table(
            two_col(
                [
                    bold_paragraph("11. Czy Pan(i) korzysta z pomocy i w jakiej postaci? (proszę zaznaczyć wszystkie formy):"),
                    *check_list(answers, "p11_pomoc", opts.ASSISTANCE_USED),
                ],
                [
                    bold_paragraph("12. W jakich obszarach oczekuje Pan(i) wsparcia/pomocy? (maksymalnie 3 potrzeby):"),
                    *check_list(answers, "p12_oczekiwane_wsparcie", opts.SUPPORT_EXPECTED),
                ],
            )
        )
    ]


def _hidden_homelessness(answers: Answers) -> list[Block]:
    paras: list[Paragraph] = [
        paragraph(
            "13.1. Czy obecnie Pan(i) pomieszkuje w domu/mieszkaniu u rodziny, znajomych, czy innych osób, "
            "tj. nie ma Pan(i) własnego miejsca zamieszkania i przebywa tymczasowo u innych osób?"
        ),
        paragraph([_yes_no_runs(answers, "p13_1_czy_pomieszkuje")]),
    ]
    if is_yes(answers, "p13_1_czy_pomieszkuje"):
        paras.append(paragraph("13.1.2. Jak długo obecnie Pan(i) pomieszkuje...?"))
        paras.append(paragraph(inline_options(answers, "p13_1_2_jak_dlugo", opts.LODGING_DURATION)))

    paras.append(paragraph("13.2. Czy w przeszłości Pan(i) tymczasowo pomieszkiwał(a)...?"))
    paras.append(paragraph([_yes_no_runs(answers, "p13_2_czy_pomieszkiwal")]))
    if is_yes(answers, "p13_2_czy_pomieszkiwal"):
        paras.append(paragraph("13.2.1. Jak długo tymczasowo Pan(i) pomieszkiwał(a)...?"))
        paras.append(paragraph(inline_options(answers, "p13_2_jak_dlugo", opts.LODGING_DURATION)))

    paras.append(paragraph(
        "13.3. Czy zna Pan(i) inne osoby, które w ciągu ostatnich 12 miesięcy tymczasowo pomieszkiwały...?"
    ))
    paras.append(paragraph([_yes_no_runs(answers, "p13_3_czy_zna")]))
    if is_yes(answers, "p13_3_czy_zna"):
        paras.append(paragraph([
            run("jeśli Tak, ile Pan(i) zna takich osób:  "),
            *inline_options(answers, "p13_3_ile_osob", opts.ACQUAINTANCE_COUNT),
        ]))

    return [
        full_width_box(bold_paragraph("13. Pytania o tzw. bezdomność ukrytą")),
        full_width_box(paras),
    ]


def _interviewer(answers: Answers) -> list[Block]:
    return [
        section_header("FUNKCJA ANKIETERA"),
        two_col_table(
            two_col(
                check_list(answers, "funkcja_ankietera", opts.INTERVIEWER_LEFT),
                check_list(answers, "funkcja_ankietera", opts.INTERVIEWER_RIGHT),
            )
        ),
    ]


def _footer(record: ResponseRecord) -> list[Block]:
    return [
        paragraph(
            [run(
                "*Wzór kwestionariusza może ulec zmianie. W takim przypadku zostanie ona zakomunikowana "
                "w odpowiednim czasie przed badaniem.",
                size=16,
            )],
            before=80,
        ),
        paragraph([run(
            f"Wygenerowano automatycznie | ID: {record.id} | {(record.ts or '')[:10]}",
            size=14,
            color=MUTED_COLOR,
        )]),
    ]


def build(record: ResponseRecord, form: FormConfig | None = None) -> Document:
    """Render `record` into the questionnaire document model."""
    form = form or FormConfig()
    answers = parse_answers(record.answers)
    blocks: list[Block] = []
    blocks += _title(form)
    blocks += _introduction()
    blocks += _interview_status(answers)
    blocks += _place(answers, form)
    blocks.append(section_header("PYTANIA"))
    blocks += _sex_and_age(answers)
    blocks += _citizenship(answers)
    blocks += _registration_and_duration(answers)
    blocks += _household(answers)
    blocks += _income_and_causes(answers)
    blocks += _assistance(answers)
    blocks += _hidden_homelessness(answers)
    blocks += _interviewer(answers)
    blocks += _footer(record)
    logger.debug("questionnaire.built id=%s blocks=%d", record.id, len(blocks))
    return Document(sections=[Section(blocks=blocks)], title=f"Kwestionariusz {record.id}")


__all__ = ["build"]
