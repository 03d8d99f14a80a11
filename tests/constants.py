from uuid import UUID

TEST_USER_ID = UUID('e850ce9b-d934-47b9-a029-b510f39d5bbc')
TEST_OTHER_USER_ID = UUID('dcef54de-bc89-4388-a7a8-dba5d8327447')

# Label ids used by the grid tests
WORK = 'work'
REST = 'rest'

# Monday, 05:00 - 21:00, 30-minute slots
TEST_WINDOW_START = 300
TEST_STEP = 30
