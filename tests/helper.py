"""
Seed data and snapshot reads of the test database.
"""

from bson import ObjectId

initial_blogs = [
    {
        "title": "React patterns",
        "author": "Michael Chan",
        "url": "https://reactpatterns.com/",
        "likes": 7,
    },
    {
        "title": "Go To Statement Considered Harmful",
        "author": "Edsger W. Dijkstra",
        "url": "http://www.u.arizona.edu/~rubinson/copyright_violations/Go_To_Considered_Harmful.html",
        "likes": 5,
    },
]

initial_persons = [
    {"name": "Arto Hellas", "number": "040-123456"},
    {"name": "Ada Lovelace", "number": "39-44-5323523"},
]


def blogs_in_db(store):
    return store.get_documents("blog")


def users_in_db(store):
    return store.get_documents("user")


def persons_in_db(store):
    return store.get_documents("person")


def non_existing_id():
    return str(ObjectId())
