# carelog/services/seed_data.py
"""
데모 모드용 샘플 데이터.

이용자 목록은 고정이고, 일일 기록은 (이용자 ID, 날짜)로 시드한 난수로 측정값을 만들기 때문에
같은 입력에 대해 항상 같은 결과가 나옵니다. 항목 id만 매번 새 UUID입니다.
"""
import random
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from carelog.models.daily_record import (
    Excretion, ExcretionAmount, ExcretionType, FecesCondition,
    Hydration, Meal, MealType, Vital, build_entry, EntryKind,
)
from carelog.models.resident import Gender
from carelog.models.user import DEMO_GUEST_UID
from carelog.utils.datetime_utils import DateTimeUtils

# (이름, 후리가나, 생년월일, 성별, 방 번호, 요개호도, 비고)
_RESIDENT_ROWS = [
    ('山田 太郎', 'ヤマダ タロウ', date(1940, 3, 15), Gender.MALE, '101', 3, '歩行に杖が必要'),
    ('鈴木 花子', 'スズキ ハナコ', date(1938, 7, 22), Gender.FEMALE, '102', 2, ''),
    ('佐藤 一郎', 'サトウ イチロウ', date(1942, 11, 8), Gender.MALE, '103', 4, '車椅子使用'),
    ('田中 美智子', 'タナカ ミチコ', date(1945, 1, 30), Gender.FEMALE, '104', 2, ''),
    ('高橋 健二', 'タカハシ ケンジ', date(1939, 5, 12), Gender.MALE, '105', 3, '糖尿病あり'),
    ('伊藤 節子', 'イトウ セツコ', date(1941, 9, 25), Gender.FEMALE, '106', 1, ''),
    ('渡辺 正夫', 'ワタナベ マサオ', date(1937, 12, 3), Gender.MALE, '107', 5, '寝たきり'),
    ('中村 和子', 'ナカムラ カズコ', date(1944, 4, 18), Gender.FEMALE, '108', 2, ''),
    ('小林 義男', 'コバヤシ ヨシオ', date(1943, 8, 7), Gender.MALE, '109', 3, '認知症あり'),
    ('加藤 幸子', 'カトウ サチコ', date(1946, 2, 14), Gender.FEMALE, '110', 1, ''),
    ('松本 清', 'マツモト キヨシ', date(1940, 6, 20), Gender.MALE, '111', 2, '高血圧あり'),
    ('井上 久美子', 'イノウエ クミコ', date(1943, 3, 11), Gender.FEMALE, '112', 3, ''),
    ('木村 勝', 'キムラ マサル', date(1938, 9, 5), Gender.MALE, '113', 4, '視力低下あり'),
    ('林 文子', 'ハヤシ フミコ', date(1941, 12, 28), Gender.FEMALE, '114', 2, ''),
    ('斎藤 博', 'サイトウ ヒロシ', date(1936, 4, 17), Gender.MALE, '115', 5, '経管栄養'),
    ('清水 芳江', 'シミズ ヨシエ', date(1944, 8, 9), Gender.FEMALE, '116', 1, ''),
    ('山口 進', 'ヤマグチ ススム', date(1939, 11, 23), Gender.MALE, '117', 3, '難聴あり'),
    ('森 たつ子', 'モリ タツコ', date(1942, 2, 6), Gender.FEMALE, '118', 2, ''),
    ('阿部 義雄', 'アベ ヨシオ', date(1937, 7, 14), Gender.MALE, '119', 4, 'パーキンソン病あり'),
    ('池田 静子', 'イケダ シズコ', date(1945, 5, 31), Gender.FEMALE, '120', 1, ''),
    ('橋本 修', 'ハシモト オサム', date(1940, 10, 2), Gender.MALE, '121', 3, '骨粗鬆症あり'),
    ('石川 千代', 'イシカワ チヨ', date(1935, 1, 19), Gender.FEMALE, '122', 5, '寝たきり、褥瘡予防'),
    ('前田 武', 'マエダ タケシ', date(1941, 6, 27), Gender.MALE, '123', 2, ''),
    ('藤田 光子', 'フジタ ミツコ', date(1943, 9, 15), Gender.FEMALE, '124', 3, 'リウマチあり'),
    ('後藤 栄一', 'ゴトウ エイイチ', date(1938, 12, 8), Gender.MALE, '125', 4, '認知症あり'),
    ('岡田 敏子', 'オカダ トシコ', date(1946, 3, 24), Gender.FEMALE, '126', 1, ''),
    ('村上 茂', 'ムラカミ シゲル', date(1939, 8, 13), Gender.MALE, '127', 3, '心不全既往'),
    ('近藤 富美子', 'コンドウ フミコ', date(1942, 11, 30), Gender.FEMALE, '128', 2, ''),
    ('石井 正', 'イシイ タダシ', date(1937, 4, 5), Gender.MALE, '129', 4, '脳梗塞後遺症'),
    ('坂本 秋子', 'サカモト アキコ', date(1944, 7, 21), Gender.FEMALE, '130', 2, '軽度難聴'),
]

SEED_RESIDENTS: List[Dict[str, Any]] = [
    {
        'name': name,
        'name_kana': name_kana,
        'birth_date': birth_date,
        'gender': gender,
        'room_number': room_number,
        'care_level': care_level,
        'notes': notes,
        'is_active': True,
    }
    for name, name_kana, birth_date, gender, room_number, care_level, notes in _RESIDENT_ROWS
]

VITAL_TIMES = ('06:00', '12:00', '18:00')
EXCRETION_SCHEDULE = (
    ('07:00', ExcretionType.URINE, ExcretionAmount.MEDIUM),
    ('10:00', ExcretionType.URINE, ExcretionAmount.SMALL),
    ('13:00', ExcretionType.BOTH, ExcretionAmount.LARGE),
    ('16:00', ExcretionType.URINE, ExcretionAmount.MEDIUM),
    ('19:00', ExcretionType.URINE, ExcretionAmount.SMALL),
)
MEAL_SCHEDULE = (
    (MealType.BREAKFAST, '08:00', 100),
    (MealType.LUNCH, '12:30', 80),
    (MealType.DINNER, '18:30', 100),
)
HYDRATION_SCHEDULE = (
    ('09:00', 150, 'お茶'),
    ('11:00', 100, 'お茶'),
    ('14:00', 200, '水'),
    ('16:00', 100, 'コーヒー'),
    ('20:00', 150, 'お茶'),
)


def _vitals(rng: random.Random, date_key: str, recorded_by: str) -> List[Vital]:
    return [
        build_entry(EntryKind.VITALS, {
            'time': time_of_day,
            'temperature': round(36.0 + rng.random() * 1.0, 1),
            'blood_pressure_high': 110 + rng.randrange(40),
            'blood_pressure_low': 60 + rng.randrange(30),
            'pulse': 60 + rng.randrange(30),
            'spo2': 95 + rng.randrange(5),
            'note': '',
        }, recorded_by, DateTimeUtils.at_time_of_day(date_key, time_of_day))
        for time_of_day in VITAL_TIMES
    ]


def _excretions(date_key: str, recorded_by: str) -> List[Excretion]:
    entries = []
    for time_of_day, excretion_type, amount in EXCRETION_SCHEDULE:
        both = excretion_type is ExcretionType.BOTH
        entries.append(build_entry(EntryKind.EXCRETIONS, {
            'time': time_of_day,
            'type': excretion_type,
            'urine_amount': amount,
            'feces_amount': ExcretionAmount.MEDIUM if both else None,
            'feces_condition': FecesCondition.NORMAL if both else None,
            'has_incontinence': False,
            'note': '',
        }, recorded_by, DateTimeUtils.at_time_of_day(date_key, time_of_day)))
    return entries


def _meals(date_key: str, recorded_by: str) -> List[Meal]:
    return [
        build_entry(EntryKind.MEALS, {
            'meal_type': meal_type,
            'main_dish_amount': amount,
            'side_dish_amount': amount - 10,
            'soup_amount': amount,
            'note': '',
        }, recorded_by, DateTimeUtils.at_time_of_day(date_key, time_of_day))
        for meal_type, time_of_day, amount in MEAL_SCHEDULE
    ]


def _hydrations(date_key: str, recorded_by: str) -> List[Hydration]:
    return [
        build_entry(EntryKind.HYDRATIONS, {
            'time': time_of_day,
            'amount': amount,
            'drink_type': drink_type,
            'note': '',
        }, recorded_by, DateTimeUtils.at_time_of_day(date_key, time_of_day))
        for time_of_day, amount, drink_type in HYDRATION_SCHEDULE
    ]


def generate_seed_records(resident_id: str, date_keys: Sequence[str],
                          recorded_by: str = DEMO_GUEST_UID) -> List[Dict[str, Any]]:
    """이용자 1명에 대해 날짜마다 DailyRecord payload를 하나씩 생성합니다."""
    records = []
    for date_key in date_keys:
        rng = random.Random(f"{resident_id}:{date_key}")
        records.append({
            'resident_id': resident_id,
            'date': date_key,
            'vitals': [e.to_dict() for e in _vitals(rng, date_key, recorded_by)],
            'excretions': [e.to_dict() for e in _excretions(date_key, recorded_by)],
            'meals': [e.to_dict() for e in _meals(date_key, recorded_by)],
            'hydrations': [e.to_dict() for e in _hydrations(date_key, recorded_by)],
        })
    return records


def get_recent_dates(days: int = 7, today: Optional[date] = None) -> List[str]:
    """오늘부터 과거 N일치 날짜 키 (최신순)."""
    return DateTimeUtils.recent_date_keys(days, today)
