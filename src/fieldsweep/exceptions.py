
class NotFoundException(Exception):
    pass


class ForbiddenException(Exception):
    pass


class StoreConflictException(Exception):
    pass


class MalformedFieldException(Exception):
    pass


class CircularReferenceException(MalformedFieldException):
    pass
