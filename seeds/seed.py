from achievehub.extensions import db
from achievehub.logging_config import setup_logging
from achievehub.services.photo_storage import PhotoStorage
from seeds.demo_data import seed_achievements, seed_engagement, seed_opportunities, seed_users


def main():
    setup_logging()
    try:
        db.reset()

        users = seed_users()
        achievements = seed_achievements(users, PhotoStorage())
        seed_engagement(users, achievements)
        seed_opportunities(users)

        print("Database seeded. Admin login: admin@example.com / Admin123!")
    finally:
        db.remove_session()


if __name__ == '__main__':
    main()
