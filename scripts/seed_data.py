"""
기본 팀/리워드 시드 스크립트
로컬 개발용 팀 카탈로그와 리워드 카탈로그를 초기 데이터로 설정
"""

import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pointrally.database.connection import SessionLocal  # noqa: E402
from pointrally.models import (  # noqa: E402
    Reward,
    RewardAvailabilityEnum,
    RewardCategoryEnum,
    SportEnum,
    Team,
)


def seed_teams_data():
    """기본 팀 데이터 시드"""

    default_teams = [
        ("Lakers", "LAL", SportEnum.NBA, "Los Angeles", "#552583", "#FDB927"),
        ("Celtics", "BOS", SportEnum.NBA, "Boston", "#007A33", "#BA9653"),
        ("Yankees", "NYY", SportEnum.MLB, "New York", "#003087", "#E4002C"),
        ("Chiefs", "KC", SportEnum.NFL, "Kansas City", "#E31837", "#FFB81C"),
        ("Maple Leafs", "TOR", SportEnum.NHL, "Toronto", "#00205B", "#FFFFFF"),
        ("LAFC", "LAFC", SportEnum.MLS, "Los Angeles", "#000000", "#C39E6D"),
    ]

    db = SessionLocal()
    try:
        for name, code, sport, city, primary, secondary in default_teams:
            existing = db.query(Team).filter(Team.code == code).first()
            if existing:
                print(f"⏭️  이미 존재하는 팀: {name}")
                continue

            db.add(
                Team(
                    name=name,
                    code=code,
                    sport=sport,
                    city=city,
                    primary_color=primary,
                    secondary_color=secondary,
                )
            )
            print(f"✅ 팀 추가: {name} ({sport.value})")

        db.commit()
        print(f"✅ 팀 시드 데이터 생성 완료: {len(default_teams)}개 팀")

    except Exception as e:
        db.rollback()
        print(f"❌ 팀 시드 데이터 생성 실패: {str(e)}")
        raise
    finally:
        db.close()


def seed_rewards_data():
    """기본 리워드 데이터 시드"""

    default_rewards = [
        {
            "name": "Concession Stand Voucher",
            "description": "$10 toward food and drinks at any home game",
            "category": RewardCategoryEnum.FOOD,
            "points_cost": 300,
            "stock": None,
        },
        {
            "name": "Team Scarf",
            "description": "Knitted scarf in home colors",
            "category": RewardCategoryEnum.MERCHANDISE,
            "points_cost": 800,
            "stock": 200,
        },
        {
            "name": "Upper Deck Tickets (2)",
            "description": "Pair of upper deck seats for a regular season game",
            "category": RewardCategoryEnum.TICKETS,
            "points_cost": 2500,
            "stock": 50,
        },
        {
            "name": "Batting Practice Access",
            "description": "Watch pregame warmups from the field level",
            "category": RewardCategoryEnum.EXPERIENCES,
            "points_cost": 6000,
            "stock": 10,
        },
        {
            "name": "Digital Fan Pack",
            "description": "Wallpapers and a highlight reel download",
            "category": RewardCategoryEnum.DIGITAL,
            "points_cost": 500,
            "stock": None,
        },
    ]

    db = SessionLocal()
    try:
        for reward_data in default_rewards:
            existing = (
                db.query(Reward).filter(Reward.name == reward_data["name"]).first()
            )

            if not existing:
                db.add(
                    Reward(
                        availability=RewardAvailabilityEnum.AVAILABLE,
                        terms=["Non-transferable", "Subject to availability"],
                        **reward_data,
                    )
                )
                print(f"✅ 리워드 추가: {reward_data['name']}")
            else:
                print(f"⏭️  이미 존재하는 리워드: {reward_data['name']}")

        db.commit()
        print(f"✅ 리워드 시드 데이터 생성 완료: {len(default_rewards)}개 리워드")

    except Exception as e:
        db.rollback()
        print(f"❌ 리워드 시드 데이터 생성 실패: {str(e)}")
        raise
    finally:
        db.close()


def main():
    """시드 데이터 실행"""
    print("🌱 시드 데이터 생성을 시작합니다...")
    print()

    print("🏟️  팀 데이터 시드 중...")
    seed_teams_data()
    print()

    print("🎁 리워드 데이터 시드 중...")
    seed_rewards_data()
    print()

    print("🎉 모든 시드 데이터 생성이 완료되었습니다!")


if __name__ == "__main__":
    main()
