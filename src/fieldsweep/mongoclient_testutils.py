
import mongomock


def mongo_connection():
    return mongomock.MongoClient()
