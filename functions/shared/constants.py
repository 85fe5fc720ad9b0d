# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

REACTIVATION_WINDOW_DAYS = 30

DEFAULT_APPLICATIONS_LIMIT = 50
MAX_APPLICATIONS_LIMIT = 100

# Each bulk item writes an update and a notification.
MAX_BULK_APPLICATION_IDS = 250

# Firestore rejects batches with more writes than this.
MAX_BATCH_WRITES = 500

MAX_OG_BATCH_IDS = 10

MAX_COMPANY_NAME_LENGTH = 200
MAX_EMAIL_LENGTH = 254
MAX_GST_NUMBER_LENGTH = 32
MAX_NOTES_LENGTH = 2000
MAX_DEACTIVATION_REASON_LENGTH = 500

DELETE_ACCOUNT_CONFIRMATION = "DELETE"
