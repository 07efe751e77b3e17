import contextlib
import logging
from typing import Any

from databases import Database
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from app import config
from db import create_db
from domain.auth import AuthenticationService, InvalidCredentials
from domain.models import Recipe
from domain.repository import ConstraintViolation, RecipeNotFound, RecipeRepository


logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: Starlette):
    db: Database = app.state.db
    await db.connect()
    await create_db(db)
    logger.info("Connected to %s", db.url)
    yield
    await db.disconnect()


async def json_body(request: Request) -> dict[str, Any]:
    try:
        data = await request.json()
    except ValueError as e:
        raise HTTPException(400, detail=f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise HTTPException(400, detail="Expected a JSON object")
    return data


def recipe_id(request: Request) -> int:
    return request.path_params["id"]


def repo(request: Request) -> RecipeRepository:
    return request.app.state.repo


async def login(request: Request) -> JSONResponse:
    data = await json_body(request)
    auth: AuthenticationService = request.app.state.auth
    token = await auth.login(str(data.get("email", "")), str(data.get("password", "")))
    return JSONResponse({"token": token})


async def register(request: Request) -> Response:
    data = await json_body(request)
    auth: AuthenticationService = request.app.state.auth
    await auth.register(
        str(data.get("name", "")),
        str(data.get("email", "")),
        str(data.get("password", "")),
    )
    return Response(status_code=204)


async def recipes(request: Request) -> Response:
    match request.method.lower():
        case "get":
            ids = None
            if "ids" in request.query_params:
                try:
                    ids = [int(i) for i in request.query_params["ids"].split(",") if i]
                except ValueError as e:
                    raise HTTPException(400, detail="ids must be integers") from e
            found = await repo(request).get_recipes(ids)
            return JSONResponse([r.to_dict() for r in found])
        case "post":
            data = await json_body(request)
            try:
                recipe = Recipe.from_dict(data)
            except (KeyError, TypeError, ValueError) as e:
                raise HTTPException(400, detail=f"Invalid recipe: {e!r}") from e
            await repo(request).add_recipe(recipe)
            return Response(status_code=204)
        case _:
            raise HTTPException(405)


async def recipe_detail(request: Request) -> Response:
    match request.method.lower():
        case "get":
            recipe = await repo(request).get_recipe(recipe_id(request))
            return JSONResponse(recipe.to_dict())
        case "delete":
            try:
                recipe = await repo(request).get_recipe(recipe_id(request))
            except RecipeNotFound:
                return Response(status_code=204)
            await repo(request).remove_recipe(recipe)
            return Response(status_code=204)
        case _:
            raise HTTPException(405)


async def liked_recipes(request: Request) -> JSONResponse:
    found = await repo(request).get_liked_recipes()
    return JSONResponse([r.to_dict() for r in found])


async def liked_recipe(request: Request) -> Response:
    match request.method.lower():
        case "get":
            liked = await repo(request).is_liked_recipe(recipe_id(request))
            return JSONResponse({"liked": liked})
        case "put":
            await repo(request).add_liked_recipe(recipe_id(request))
            return Response(status_code=204)
        case "delete":
            await repo(request).remove_liked_recipe(recipe_id(request))
            return Response(status_code=204)
        case _:
            raise HTTPException(405)


async def meal_plan(request: Request) -> JSONResponse:
    plan = await repo(request).get_recipes_in_meal_plan()
    return JSONResponse(
        {category: [r.to_dict() for r in found] for category, found in plan.items()}
    )


async def meal_plan_recipe(request: Request) -> Response:
    match request.method.lower():
        case "get":
            categories = await repo(request).get_category_names_for_recipe_in_meal_plan(
                recipe_id(request)
            )
            return JSONResponse({"in_meal_plan": bool(categories), "categories": categories})
        case "put":
            data = await json_body(request)
            categories = data.get("categories")
            if not isinstance(categories, list) or not all(
                isinstance(c, str) for c in categories
            ):
                raise HTTPException(400, detail="categories must be a list of strings")
            await repo(request).add_recipe_to_meal_plan(recipe_id(request), categories)
            return Response(status_code=204)
        case _:
            raise HTTPException(405)


async def meal_plan_entry(request: Request) -> Response:
    await repo(request).remove_recipe_from_meal_plan(
        recipe_id(request), request.path_params["category"]
    )
    return Response(status_code=204)


async def not_found(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": f"Recipe {exc} not found"}, status_code=404)


async def conflict(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=409)


async def unauthorized(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=401)


def create_app(conf: config.Config | None = None) -> Starlette:
    conf = config.Config() if conf is None else conf
    logging.basicConfig(level=conf.log_level)

    app = Starlette(
        debug=True if conf.env == config.Env.local else False,
        routes=[
            Route("/login", login, methods=["POST"]),
            Route("/register", register, methods=["POST"]),
            Route("/recipes", recipes, methods=["GET", "POST"]),
            Route("/recipes/{id:int}", recipe_detail, methods=["GET", "DELETE"]),
            Route("/liked", liked_recipes),
            Route("/liked/{id:int}", liked_recipe, methods=["GET", "PUT", "DELETE"]),
            Route("/meal-plan", meal_plan),
            Route("/meal-plan/{id:int}", meal_plan_recipe, methods=["GET", "PUT"]),
            Route(
                "/meal-plan/{id:int}/{category:str}",
                meal_plan_entry,
                methods=["DELETE"],
            ),
        ],
        exception_handlers={
            RecipeNotFound: not_found,
            ConstraintViolation: conflict,
            InvalidCredentials: unauthorized,
        },
        lifespan=lifespan,
    )

    db = Database(conf.db_url)
    app.state.db = db
    app.state.repo = RecipeRepository(db)
    app.state.auth = AuthenticationService(token=conf.auth_token, delay=conf.login_delay)
    return app


app = create_app()
