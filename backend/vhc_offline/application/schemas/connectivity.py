from pydantic import BaseModel


class ConnectivityResponse(BaseModel):
    online: bool
    pending_operations: int
    sync_running: bool
