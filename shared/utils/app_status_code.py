class AppStatusCode:
    # Success
    OPERATION_SUCCESSFUL = "100"
    DATA_RETRIEVED_SUCCESSFULLY = "101"
    CREATED_SUCCESSFULLY = "102"
    UPDATED_SUCCESSFULLY = "103"

    # Client side
    INVALID_INPUT = "200"
    VALIDATION_FAILED = "201"
    NOT_FOUND = "202"
    CONCURRENT_UPDATE = "203"
    ROOM_FULL = "204"

    # Server side
    OPERATION_FAILED = "300"
    OPERATION_ERROR = "301"
    PERSISTENCE_FAILED = "302"
    SIDE_EFFECT_FAILED = "303"
