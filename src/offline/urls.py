SUBMIT_RSVP_URL = "/rsvp"
UPLOAD_PHOTO_URL = "/photos"
OFFLINE_STATUS_URL = "/offline/status"
PENDING_ITEMS_URL = "/offline/pending/{collection}"
SYNC_NOW_URL = "/offline/sync"
NETWORK_EVENT_URL = "/offline/network/{event}"
WEDDING_DATA_URL = "/offline/wedding-data/{key}"
CACHED_IMAGE_URL = "/offline/images"
