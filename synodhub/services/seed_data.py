"""First-run contents for each local collection (used until a collection is first saved)"""

import time
from typing import Any, Dict, List

SEED_ADMIN_ID = "sa_root"


def seed_users() -> List[Dict[str, Any]]:
    return [
        {
            "id": SEED_ADMIN_ID,
            "name": "System Super Admin",
            "email": "admin@ccap.org",
            "phone": "+265999123456",
            "role": "SUPER_ADMIN",
            "avatar": "https://ui-avatars.com/api/?name=Super+Admin&background=4f46e5&color=fff",
            "position": "System Administrator",
            "status": "active",
            "password": "password123",
        }
    ]


def seed_departments() -> List[Dict[str, Any]]:
    return [
        {"id": "Education", "name": "Education", "head": "Rev. John Banda",
         "description": "Managing synod schools and universities."},
        {"id": "Health", "name": "Health", "head": "Dr. Mary Phiri",
         "description": "Overseeing mission hospitals and clinics."},
        {"id": "Evangelism", "name": "Evangelism", "head": "Rev. Peter Moyo",
         "description": "Spreading the gospel across the region."},
        {"id": "Finance", "name": "Finance", "head": "Mr. James Chirwa",
         "description": "Managing synod resources and assets."},
        {"id": "Youth", "name": "Youth", "head": "Pastor Alice Gondwe",
         "description": "Empowering the next generation."},
        {"id": "Women", "name": "Women's Guild", "head": "Mrs. Grace K",
         "description": "Spiritual growth for women."},
    ]


def seed_locations() -> List[Dict[str, Any]]:
    return [
        {"id": "l1", "name": "St. Andrews Church", "district": "Mzuzu City", "adminId": "la1",
         "address": "Mzuzu City Center"},
        {"id": "l2", "name": "Ekwendeni Mission", "district": "Mzimba", "adminId": "la2",
         "address": "Ekwendeni"},
        {"id": "l3", "name": "Livingstonia Mission", "district": "Rumphi", "adminId": "la3",
         "address": "Khondowe"},
        {"id": "l19", "name": "Bandawe Mission", "district": "Nkhata Bay", "adminId": "la19",
         "address": "Bandawe"},
        {"id": "l24", "name": "Karonga Boma CCAP", "district": "Karonga", "adminId": "la24",
         "address": "Karonga Boma"},
        {"id": "l32", "name": "Likoma CCAP", "district": "Likoma", "adminId": "la32",
         "address": "Likoma Island"},
    ]


def seed_announcements() -> List[Dict[str, Any]]:
    return [
        {"id": "1", "departmentId": "Education", "title": "School Inspections",
         "message": "All district admins to submit school reports.",
         "meetingTime": "Next Monday, 10:00 AM", "author": "Rev. John Banda", "date": "2023-10-24"},
        {"id": "2", "departmentId": "Health", "title": "Medicine Supply",
         "message": "New batch of supplies arriving at Ekwendeni Hospital.",
         "author": "Dr. Mary Phiri", "date": "2023-10-23"},
    ]


def seed_chats() -> List[Dict[str, Any]]:
    return [
        {
            "id": "1",
            "userId": SEED_ADMIN_ID,
            "userName": "System Super Admin",
            "content": "Welcome to the new CCAP Livingstonia Synod Management System.",
            "timestamp": int(time.time() * 1000),
            "role": "SUPER_ADMIN",
        }
    ]


SEEDS = {
    "users": seed_users,
    "announcements": seed_announcements,
    "locations": seed_locations,
    "departments": seed_departments,
    "chats": seed_chats,
}


def seed_for(collection: str) -> List[Dict[str, Any]]:
    factory = SEEDS.get(collection)
    return factory() if factory else []
