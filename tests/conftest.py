from __future__ import annotations

import csv
import io

import pytest

from covex.core.schema import CovidRow
from covex.ingest import parse_covid_rows

# Five days for seven countries across all six continents. AFG/ALB/DZA/BRA/ARG
# carry no testing data; ARG has no new_deaths on the last day.
COVID_CSV = """\
iso_code,continent,location,date,total_cases,new_cases,total_deaths,new_deaths,total_tests,new_tests,tests_units,population
AFG,Asia,Afghanistan,2020-04-01,192,18,4,0,,,,38928341
AFG,Asia,Afghanistan,2020-04-02,235,43,4,0,,,,38928341
AFG,Asia,Afghanistan,2020-04-03,269,34,5,1,,,,38928341
AFG,Asia,Afghanistan,2020-04-04,270,1,5,0,,,,38928341
AFG,Asia,Afghanistan,2020-04-05,299,29,7,2,,,,38928341
ALB,Europe,Albania,2020-04-01,243,20,15,0,,,,2877800
ALB,Europe,Albania,2020-04-02,259,16,15,0,,,,2877800
ALB,Europe,Albania,2020-04-03,277,18,16,1,,,,2877800
ALB,Europe,Albania,2020-04-04,304,27,17,1,,,,2877800
ALB,Europe,Albania,2020-04-05,333,29,20,3,,,,2877800
DZA,Africa,Algeria,2020-04-01,716,132,44,9,,,,43851043
DZA,Africa,Algeria,2020-04-02,847,131,58,14,,,,43851043
DZA,Africa,Algeria,2020-04-03,986,139,83,25,,,,43851043
DZA,Africa,Algeria,2020-04-04,1171,185,105,22,,,,43851043
DZA,Africa,Algeria,2020-04-05,1251,80,130,25,,,,43851043
USA,North America,United States,2020-04-01,188172,24998,3873,911,1052768,104133,tests performed,331002647
USA,North America,United States,2020-04-02,213372,25200,4757,884,1192220,139452,tests performed,331002647
USA,North America,United States,2020-04-03,243453,30081,5926,1169,1338620,146400,tests performed,331002647
USA,North America,United States,2020-04-04,275586,32133,7087,1161,1545210,206590,tests performed,331002647
USA,North America,United States,2020-04-05,308850,33264,8407,1320,1775424,230214,tests performed,331002647
AUS,Oceania,Australia,2020-04-01,4557,198,18,0,251875,10412,tests performed,25499884
AUS,Oceania,Australia,2020-04-02,4707,150,20,2,263351,11476,tests performed,25499884
AUS,Oceania,Australia,2020-04-03,4976,269,21,1,274183,10832,tests performed,25499884
AUS,Oceania,Australia,2020-04-04,5224,248,23,2,283799,9616,tests performed,25499884
AUS,Oceania,Australia,2020-04-05,5548,324,28,5,291116,7317,tests performed,25499884
BRA,South America,Brazil,2020-04-01,5717,1138,201,42,,,,212559409
BRA,South America,Brazil,2020-04-02,6836,1119,241,40,,,,212559409
BRA,South America,Brazil,2020-04-03,8044,1208,327,86,,,,212559409
BRA,South America,Brazil,2020-04-04,9056,1012,359,32,,,,212559409
BRA,South America,Brazil,2020-04-05,10360,1304,432,73,,,,212559409
ARG,South America,Argentina,2020-04-01,1054,88,27,3,,,,45195777
ARG,South America,Argentina,2020-04-02,1133,79,36,9,,,,45195777
ARG,South America,Argentina,2020-04-03,1265,132,39,3,,,,45195777
ARG,South America,Argentina,2020-04-04,1353,88,43,4,,,,45195777
ARG,South America,Argentina,2020-04-05,1451,98,48,,,,,45195777
"""


def read_csv(text: str) -> list[dict[str, str]]:
    return list(csv.DictReader(io.StringIO(text)))


@pytest.fixture
def raw_rows() -> list[dict[str, str]]:
    return read_csv(COVID_CSV)


@pytest.fixture
def parsed_rows(raw_rows) -> list[CovidRow]:
    result = parse_covid_rows(raw_rows)
    assert result.ok
    return result.rows
