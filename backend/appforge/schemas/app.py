from typing import Optional

from .page import PageRequest

class AppQueryRequest(PageRequest):
    id: Optional[int] = None
    app_name: Optional[str] = None
    cover: Optional[str] = None
    init_prompt: Optional[str] = None
    code_gen_type: Optional[str] = None
    deploy_key: Optional[str] = None
    priority: Optional[int] = None
    user_id: Optional[int] = None
