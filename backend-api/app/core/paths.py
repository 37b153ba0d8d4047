import os


def get_project_root() -> str:
    """backend-api 프로젝트 루트 절대경로를 반환한다.
    이 파일은 backend-api/app/core/paths.py 에 위치하므로,
    상위 상위 디렉토리가 프로젝트 루트가 된다.
    """
    app_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    project_root = os.path.dirname(app_dir)
    return project_root


def resolve_project_path(path: str) -> str:
    """상대경로면 프로젝트 루트 기준 절대경로로 바꾼다 (키 파일 등)."""
    if os.path.isabs(path):
        return path
    return os.path.join(get_project_root(), path)
